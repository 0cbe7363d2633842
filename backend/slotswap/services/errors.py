"""
Domain error taxonomy.

Every failure the core reports is one of these. The application layer maps
them onto HTTP responses in one place (see main.py); the core never builds
HTTP errors itself.
"""

from typing import Any, Optional


class SlotSwapError(Exception):
    """Base class for all errors surfaced to callers."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind, **self.extra}


class ValidationError(SlotSwapError):
    """Malformed or missing input."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(SlotSwapError):
    """Referenced entity is absent."""

    kind = "not_found"
    status_code = 404


class AuthorizationError(SlotSwapError):
    """Actor lacks rights over the entity."""

    kind = "forbidden"
    status_code = 403


class ConflictError(SlotSwapError):
    """Requested time range overlaps an existing slot."""

    kind = "time_conflict"
    status_code = 409

    def __init__(self, message: str, conflict: Optional[dict] = None):
        super().__init__(message, conflict=conflict or {})


class StateError(SlotSwapError):
    """
    Entity is not in the state the transition requires.

    Covers stale/duplicate swap responses as well as write conflicts with a
    concurrent transaction. The latter are flagged retryable; the caller
    decides whether to try again.
    """

    kind = "invalid_state"
    status_code = 409

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message, retryable=retryable)
        self.retryable = retryable


class StorageError(SlotSwapError):
    """Storage fault; the transaction was aborted and nothing persisted."""

    kind = "storage_error"
    status_code = 503
