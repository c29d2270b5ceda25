"""
Pagination over a DocumentStore.

The page fetch and the total count are issued concurrently; the result is
the envelope consumed by list views:

    {"data": [...], "pagination": {"page", "limit", "total", "totalPages",
     "hasNextPage", "hasPrevPage", "nextPage", "prevPage"}}
"""

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any

from ..constants import DEFAULT_PAGE_SIZE
from ..exceptions import QueryError
from .store import DocumentStore, Population, QueryRequest, SortSpec, projection_for


@dataclass
class PaginationInfo:
    """Pagination metadata for one page of results."""

    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.has_next_page else None

    @property
    def prev_page(self) -> int | None:
        return self.page - 1 if self.has_prev_page else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
            "hasPrevPage": self.has_prev_page,
            "nextPage": self.next_page,
            "prevPage": self.prev_page,
        }


@dataclass
class Page:
    """One page of documents plus its pagination metadata."""

    data: list[dict[str, Any]] = field(default_factory=list)
    pagination: PaginationInfo = field(default_factory=lambda: PaginationInfo(1, 1, 0))

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "pagination": self.pagination.to_dict()}


async def paginate(
    store: DocumentStore,
    filter: dict[str, Any] | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    sort: SortSpec | None = None,
    populate: list[Population] | None = None,
    select: tuple[str, ...] | list[str] | dict[str, Any] | None = None,
) -> Page:
    """
    Fetch one page of documents and the total count.

    Args:
        store: DocumentStore for the collection
        filter: Query filter
        page: 1-based page number
        limit: Page size
        sort: List of (field, direction) pairs; newest first by default
        populate: References to resolve inline
        select: Field names (or a ready projection dict) to return

    Returns:
        Page with data and pagination metadata

    Raises:
        QueryError: If page or limit is not an integer or is below 1
    """
    try:
        page = int(page)
        limit = int(limit)
    except (TypeError, ValueError) as e:
        raise QueryError(
            "page and limit must be positive integers",
            context={"page": page, "limit": limit},
        ) from e
    if page < 1 or limit < 1:
        raise QueryError(
            "page and limit must be positive integers",
            context={"page": page, "limit": limit},
        )

    filter = filter or {}
    projection = select if isinstance(select, dict) else projection_for(select)
    request = QueryRequest(
        filter=filter,
        sort=sort if sort is not None else [("created_at", -1)],
        projection=projection,
        skip=(page - 1) * limit,
        limit=limit,
        populate=list(populate or []),
    )

    data, total = await asyncio.gather(store.find(request), store.count(filter))

    return Page(data=data, pagination=PaginationInfo(page=page, limit=limit, total=total))
