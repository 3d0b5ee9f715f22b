"""
Service interfaces for dependency inversion.
Allows swapping the record store backend without changing scheduling logic.
"""

from .record_store import RecordStore
from .memory_store import InMemoryRecordStore

__all__ = ['RecordStore', 'InMemoryRecordStore']
