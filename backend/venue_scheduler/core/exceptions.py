"""
Scheduling error taxonomy.

Every engine failure is one of four kinds, each carrying the HTTP status the
API layer renders it with:

  NotFoundError      -> 404  a referenced id is missing from its table
  ConflictError      -> 400  the operation would break a capacity, scheduling
                             or emptiness rule
  InvalidInputError  -> 422  field values a record cannot hold
  InternalError      -> 500  stored state already breaks an invariant, or the
                             store itself failed
"""

from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base exception for the scheduling engine."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(SchedulingError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details=details,
        )


class ConflictError(SchedulingError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=400,
            details=details,
        )


class InternalError(SchedulingError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INTERNAL",
            status_code=500,
            details=details,
        )


class InvalidInputError(SchedulingError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INVALID_INPUT",
            status_code=422,
            details=details,
        )
