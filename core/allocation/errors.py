"""
Allocation error taxonomy.

Each error carries the HTTP status the web layer maps it to, and the batch
state the orchestrator was left in.
"""

from typing import Any, Dict, Optional

from core.allocation.models import BatchState


class AllocationError(Exception):
    """Base exception for allocation errors."""
    status_code = 500

    def __init__(self, message: str, state: Optional[BatchState] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.state = state
        self.details = details or {}


class ValidationError(AllocationError):
    """Malformed or missing input; raised before any orchestration step."""
    status_code = 400


class NotFoundError(AllocationError):
    """No such position, or no eligible positions for the request."""
    status_code = 404

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, state=BatchState.REJECTED, details=details)


class ConflictError(AllocationError):
    """Already assigned (without force or by a concurrent batch), no active recruiters, or no capacity left."""
    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, state=BatchState.REJECTED, details=details)


class PersistenceError(AllocationError):
    """Write failure after capacity was reserved; reservations have been released."""
    status_code = 500
