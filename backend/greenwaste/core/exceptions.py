"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status it maps to and a user-facing message.
The message is safe to return to clients; underlying storage or gateway text
goes to the log only.
"""
from typing import Optional
from fastapi import status


class DomainError(Exception):
    """Base class for errors surfaced to API clients."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "domain_error"
    default_message: str = "שגיאה בעיבוד הבקשה"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)


class DomainValidationError(DomainError):
    """Malformed or out-of-range input."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "נתונים לא תקינים"


class InvalidVolumeError(DomainValidationError):
    code = "invalid_volume"
    default_message = "נפח חייב להיות גדול מ-0"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, field="volume")


class NotFoundError(DomainError):
    """Referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "הפריט המבוקש לא נמצא"


class PricingNotFoundError(NotFoundError):
    code = "pricing_not_found"
    default_message = "לא נמצא תמחור פעיל עבור היישוב וסוג המכל הנבחרים"


class AmbiguousPricingError(DomainError):
    """More than one active price exists where exactly one is expected."""
    status_code = status.HTTP_409_CONFLICT
    code = "ambiguous_pricing"
    default_message = "נמצא יותר מתמחור פעיל אחד עבור היישוב וסוג המכל הנבחרים"


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "כבר קיים תמחור פעיל עבור יישוב וסוג מכל זה"


class UpstreamError(DomainError):
    """Storage or messaging gateway failure."""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_error"
    default_message = "שגיאה בגישה לשירות חיצוני"
