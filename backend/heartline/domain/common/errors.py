"""Domain-level error taxonomy shared by every feature area.

Each error carries a machine-readable ``reason`` and the HTTP status it maps to.
Feature modules subclass these with their own default reasons.
"""

from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base class for expected, user-facing failures."""

    reason: str = "unknown"
    status_code: int = 400
    message: str = "Request failed"

    def __init__(self, reason: str | None = None, *, message: str | None = None, errors: Optional[list[Any]] = None) -> None:
        if reason:
            self.reason = reason
        if message:
            self.message = message
        self.errors = errors
        super().__init__(self.reason)


class ValidationFailed(DomainError):
    reason = "validation_error"
    status_code = 400
    message = "Invalid request"


class Unauthenticated(DomainError):
    reason = "unauthenticated"
    status_code = 401
    message = "Authentication required"


class Forbidden(DomainError):
    reason = "forbidden"
    status_code = 403
    message = "Not allowed"


class NotFound(DomainError):
    reason = "not_found"
    status_code = 404
    message = "Not found"


class Conflict(DomainError):
    reason = "conflict"
    status_code = 409
    message = "Conflicting state"
