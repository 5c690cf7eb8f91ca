"""
Page-based pagination schemas.
"""

from __future__ import annotations

import math
from typing import Generic, List, TypeVar

from pydantic import Field

from hostel_admin.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = ["PaginationParams", "PaginationMeta", "PaginatedResponse"]


class PaginationParams(BaseSchema):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=20, ge=1, le=100, description="Items per page")


class PaginationMeta(BaseSchema):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    has_next: bool
    has_previous: bool


class PaginatedResponse(BaseSchema, Generic[T]):
    """Generic paginated response."""

    success: bool = True
    data: List[T]
    pagination: PaginationMeta

    @classmethod
    def create(cls, items: List[T], total: int, page: int, limit: int) -> "PaginatedResponse[T]":
        total_pages = math.ceil(total / limit) if total else 0
        return cls(
            data=items,
            pagination=PaginationMeta(
                total=total,
                page=page,
                limit=limit,
                total_pages=total_pages,
                has_next=page < total_pages,
                has_previous=page > 1,
            ),
        )
