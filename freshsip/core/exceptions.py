"""Domain exceptions raised by the order services.

Handlers never build error responses themselves; the exception handler in
``freshsip.main`` turns these into ``{"error": message, **extra}`` bodies.
"""
from typing import Any, Dict, Optional


class OrderLifecycleError(Exception):
    """Base exception for order lifecycle errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class UnauthorizedError(OrderLifecycleError):
    """No usable credentials on the request."""
    status_code = 401


class ForbiddenError(OrderLifecycleError):
    """Caller is authenticated but lacks the role or slot for the action."""
    status_code = 403


class NotFoundError(OrderLifecycleError):
    status_code = 404


class InvalidInputError(OrderLifecycleError):
    status_code = 400


class ConflictError(OrderLifecycleError):
    """The order is not in a state that allows the requested change."""
    status_code = 400


class ConcurrentUpdateError(OrderLifecycleError):
    """The stored document changed between load and save."""
    status_code = 409
