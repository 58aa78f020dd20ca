from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generic, Literal, Optional, TypeVar

from fastapi import HTTPException, Query, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from rfp_hub.config import settings

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case input, serializes camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str = "Success"
    data: Optional[T] = None
    error: Optional[str] = None
    pagination: Optional[PaginationMeta] = None


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = (total + limit - 1) // limit
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
    )


@dataclass
class PageParams:
    page: int
    limit: int
    search: Optional[str] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def order_by(self, columns: dict):
        """Resolve sortBy against an allow-list of sortable columns."""
        column = columns.get(self.sort_by)
        if column is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot sort by '{self.sort_by}'. Allowed: {sorted(columns)}",
            )
        return column.asc() if self.sort_order == "asc" else column.desc()


def page_params(
    page: int = Query(1, ge=1, le=10_000),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: str = Query("createdAt", alias="sortBy", max_length=50),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
) -> PageParams:
    return PageParams(
        page=page,
        limit=limit,
        search=search or None,
        sort_by=sort_by or "createdAt",
        sort_order=sort_order,
    )


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
