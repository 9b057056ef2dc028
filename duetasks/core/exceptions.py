"""Custom exceptions."""
from typing import Optional
from fastapi import HTTPException, status
from duetasks.localization.helpers import get_translation


class AppError(HTTPException):
    """HTTP error carrying a machine-readable code alongside the message."""

    code = "ERROR"
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_key = "errors.bad_request"

    def __init__(self, detail: Optional[str] = None, locale: str = "en", **kwargs):
        if detail is None:
            detail = get_translation(self.message_key, locale, **kwargs)
        self.message = detail
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": self.code, "message": detail},
        )

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(AppError):
    """Unauthorized exception."""

    code = "UNAUTHORIZED"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    message_key = "errors.not_authenticated"


class BadRequestError(AppError):
    """Validation failure detected before any mutation."""

    code = "BAD_REQUEST"
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_key = "errors.bad_request"


class NotFoundError(AppError):
    """Resource not found exception."""

    code = "NOT_FOUND"
    status_code_default = status.HTTP_404_NOT_FOUND
    message_key = "errors.resource_not_found"


class ConflictError(AppError):
    """Conflict exception."""

    code = "CONFLICT"
    status_code_default = status.HTTP_409_CONFLICT
    message_key = "errors.resource_conflict"


class StorageError(AppError):
    """Object storage operation failed."""

    code = "STORAGE"
    status_code_default = status.HTTP_502_BAD_GATEWAY
    message_key = "errors.storage_failed"


class PersistenceError(AppError):
    """Record store operation failed."""

    code = "DB"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_key = "errors.persistence_failed"


class UnparseableDateTimeError(ValueError):
    """A due value does not match YYYY-MM-DDTHH:mm."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unparseable local date-time: {value!r}")
