"""Application error taxonomy.

Every error carries an HTTP status, a stable machine-readable ``code`` and a
human-readable message; the API layer renders them as
``{"error": ..., "message": ..., "code": ...}``.
"""
from typing import Optional

from fastapi import status


class AppError(Exception):
    """Базовая ошибка приложения"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    error: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message or self.error)

    def to_dict(self) -> dict:
        body = {"error": self.error, "code": self.code}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    error = "Invalid request"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    error = "Authentication required"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    error = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    error = "Conflict"


class InternalError(AppError):
    pass
