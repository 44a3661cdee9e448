"""Error kinds shared by the persistence layer, the owner dashboard and the
public booking workflow."""

from typing import Optional


class BarberbookError(Exception):
    """Base class for every domain error raised by the application."""


class NotAuthenticated(BarberbookError):
    """No owner identity is available for an owner-scoped operation."""


class NotFound(BarberbookError):
    """Unknown business slug, service or appointment."""


class ValidationFailed(BarberbookError):
    """Malformed input or a slot that is not bookable."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceFailed(BarberbookError):
    """The backend could not complete the operation."""


def user_friendly_error(exc: Exception) -> str:
    """Map an exception to a short message suitable for display."""
    if isinstance(exc, NotAuthenticated):
        return "Please sign in to continue."
    if isinstance(exc, NotFound):
        return "Not found or no longer available."
    if isinstance(exc, ValidationFailed):
        return f"Please check the information provided: {exc}"
    if isinstance(exc, PersistenceFailed):
        return "The service is temporarily unavailable, please try again."
    return "Something went wrong, please try again later."
