"""
Shared response schemas - envelope, pagination, errors etc
"""

from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PageMeta(BaseModel):
    """Pagination metadata"""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class Page(BaseModel, Generic[T]):
    """One page of results plus its metadata"""

    items: List[T]
    meta: PageMeta

    @classmethod
    def create(cls, items: List[T], total: int, page: int, limit: int) -> "Page[T]":
        # calculate page info
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            items=items,
            meta=PageMeta(total=total, page=page, limit=limit, total_pages=total_pages),
        )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    success: bool = Field(default=True, description="Operation success status")
    data: T
    timestamp: datetime = Field(default_factory=_now)
    path: str = Field(description="Request path")

    @classmethod
    def wrap(cls, data: Any, request: Request) -> "ApiResponse[T]":
        return cls(data=data, path=request.url.path)


class ErrorDetail(BaseModel):
    kind: str = Field(description="Machine-stable error kind")
    message: str = Field(description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Error envelope."""

    success: bool = False
    error: ErrorDetail
    timestamp: datetime = Field(default_factory=_now)
    path: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": {
                    "kind": "FORBIDDEN",
                    "message": "You do not have access to this note",
                },
                "timestamp": "2025-09-13T17:23:45Z",
                "path": "/api/notes/123e4567-e89b-12d3-a456-426614174000",
            }
        }
    )


class MessageResponse(BaseModel):
    message: str


class CountResponse(BaseModel):
    count: int


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(default_factory=_now)
    version: str = Field(description="Application version")
    checks: dict[str, dict[str, Any]] = Field(description="Individual component health checks")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2025-09-13T10:30:00Z",
                "version": "1.0.0",
                "checks": {
                    "database": {"status": "healthy", "response_time_ms": 15},
                    "redis": {"status": "healthy", "response_time_ms": 5},
                    "realtime": {"status": "healthy", "online_users": 3},
                },
            }
        }
    )
