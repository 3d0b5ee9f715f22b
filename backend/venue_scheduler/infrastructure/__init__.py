"""
Infrastructure layer - external system integrations.
Keeps scheduling logic clean from storage details.
"""

from .redis_client import get_redis, close_redis
from .redis_store import RedisRecordStore

__all__ = ['get_redis', 'close_redis', 'RedisRecordStore']
