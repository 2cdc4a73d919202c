"""Typed failures raised by services.

Each one is an ``HTTPException`` so FastAPI maps it to a status code on its
own; ``error_kind`` is the machine-stable code rendered in the error envelope.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_kind = "INTERNAL_ERROR"
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, details: Optional[Any] = None, headers=None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )
        self.details = details


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_kind = "NOT_FOUND"
    default_detail = "Resource not found"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_kind = "FORBIDDEN"
    default_detail = "Access denied"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_kind = "BAD_REQUEST"
    default_detail = "Bad request"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_kind = "CONFLICT"
    default_detail = "Resource already exists"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_kind = "UNAUTHORIZED"
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(detail, details, headers={"WWW-Authenticate": "Bearer"})


_KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: BadRequestError.error_kind,
    status.HTTP_401_UNAUTHORIZED: UnauthorizedError.error_kind,
    status.HTTP_403_FORBIDDEN: ForbiddenError.error_kind,
    status.HTTP_404_NOT_FOUND: NotFoundError.error_kind,
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: ConflictError.error_kind,
    status.HTTP_422_UNPROCESSABLE_ENTITY: "VALIDATION_ERROR",
}


def error_kind_for(exc: HTTPException) -> str:
    """Error kind for any HTTPException, including plain ones raised by FastAPI itself."""
    kind = getattr(exc, "error_kind", None)
    if kind:
        return kind
    if exc.status_code >= 500:
        return AppError.error_kind
    return _KIND_BY_STATUS.get(exc.status_code, "HTTP_ERROR")
