"""
Blog query helpers: search, related and popular posts, statistics.

All helpers take the DocumentStore of the blogs collection. Author
references are resolved from the users collection.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from bson import ObjectId

from ..constants import (
    AUTHOR_SUMMARY_FIELDS,
    BLOG_CARD_FIELDS,
    BLOG_LIST_FIELDS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RELATED_LIMIT,
    TEXT_SEARCH_FIELDS,
    TIMEFRAME_DAYS,
    USERS_COLLECTION,
)
from ..exceptions import QueryError
from .pagination import Page, paginate
from .store import TEXT_SCORE, DocumentStore, Population, QueryRequest, projection_for

logger = logging.getLogger(__name__)

AUTHOR_POPULATION = Population(
    path="author", collection=USERS_COLLECTION, select=AUTHOR_SUMMARY_FIELDS
)


def _as_object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


@dataclass
class SearchParams:
    """
    Blog search parameters.

    Every filter is optional; ``status`` is applied only when given.
    """

    query: str | None = None
    category: str | None = None
    tags: str | list[str] | None = None
    status: str | None = None
    featured: bool | str | None = None
    author: str | ObjectId | None = None
    exclude: str | ObjectId | None = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = "created_at"
    sort_order: str = "desc"


def build_search_filter(params: SearchParams, text_index: bool) -> dict[str, Any]:
    """
    Build the query filter for a blog search.

    Args:
        params: Search parameters
        text_index: Whether the collection has a text index; without one the
            free-text query becomes a case-insensitive substring match

    Returns:
        MongoDB filter dictionary
    """
    filter: dict[str, Any] = {}

    if params.status:
        filter["status"] = params.status

    query = params.query.strip() if params.query else ""
    if query:
        if text_index:
            filter["$text"] = {"$search": query}
        else:
            pattern = re.escape(query)
            filter["$or"] = [
                {name: {"$regex": pattern, "$options": "i"}} for name in TEXT_SEARCH_FIELDS
            ]

    if params.category:
        filter["category"] = params.category

    if params.tags:
        tags = params.tags if isinstance(params.tags, list) else [params.tags]
        filter["tags"] = {"$in": tags}

    if params.featured is not None:
        filter["featured"] = params.featured is True or params.featured == "true"

    if params.author:
        filter["author"] = _as_object_id(params.author)

    if params.exclude:
        filter["_id"] = {"$ne": _as_object_id(params.exclude)}

    return filter


async def search_blogs(store: DocumentStore, params: SearchParams | None = None) -> Page:
    """
    Search blogs and return one page of list-view results.

    With a free-text query and a text index, results are ordered by text
    relevance first and then by ``sort_by``.

    Args:
        store: DocumentStore for the blogs collection
        params: Search parameters

    Returns:
        Page of blogs with authors resolved
    """
    params = params or SearchParams()
    direction = -1 if params.sort_order == "desc" else 1

    has_query = bool(params.query and params.query.strip())
    text_index = await store.has_text_index() if has_query else False
    if has_query and not text_index:
        logger.debug("No text index on blogs collection, using regex search")

    filter = build_search_filter(params, text_index)

    projection = projection_for(BLOG_LIST_FIELDS)
    sort: list[tuple[str, Any]] = []
    if has_query and text_index:
        projection["score"] = TEXT_SCORE
        sort.append(("score", TEXT_SCORE))
    sort.append((params.sort_by, direction))

    return await paginate(
        store,
        filter,
        page=params.page,
        limit=params.limit,
        sort=sort,
        populate=[AUTHOR_POPULATION],
        select=projection,
    )


async def related_blogs(
    store: DocumentStore, blog: dict[str, Any], limit: int = DEFAULT_RELATED_LIMIT
) -> list[dict[str, Any]]:
    """
    Published blogs sharing the category or any tag with ``blog``.

    Args:
        store: DocumentStore for the blogs collection
        blog: Current blog document
        limit: Maximum number of results

    Returns:
        Newest related blogs, excluding ``blog`` itself
    """
    request = QueryRequest(
        filter={
            "_id": {"$ne": blog.get("_id")},
            "status": "published",
            "$or": [
                {"category": blog.get("category")},
                {"tags": {"$in": blog.get("tags") or []}},
            ],
        },
        sort=[("created_at", -1)],
        projection=projection_for(BLOG_CARD_FIELDS),
        limit=limit,
        populate=[AUTHOR_POPULATION],
    )
    return await store.find(request)


async def popular_blogs(
    store: DocumentStore,
    limit: int = DEFAULT_PAGE_SIZE,
    timeframe: str | None = None,
    category: str | None = None,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """
    Most viewed, then most liked, published blogs.

    Args:
        store: DocumentStore for the blogs collection
        limit: Maximum number of results
        timeframe: Optional lookback window ("week", "month" or "year")
        category: Optional category filter
        now: Reference time for the timeframe (defaults to current UTC time)

    Raises:
        QueryError: If timeframe is not recognised
    """
    filter: dict[str, Any] = {"status": "published"}

    if category:
        filter["category"] = category

    if timeframe:
        if timeframe not in TIMEFRAME_DAYS:
            raise QueryError(f"Unknown timeframe: {timeframe}", context={"timeframe": timeframe})
        now = now or datetime.now(timezone.utc)
        filter["created_at"] = {"$gte": now - timedelta(days=TIMEFRAME_DAYS[timeframe])}

    request = QueryRequest(
        filter=filter,
        sort=[("view_count", -1), ("like_count", -1), ("created_at", -1)],
        projection=projection_for(BLOG_CARD_FIELDS),
        limit=limit,
        populate=[AUTHOR_POPULATION],
    )
    return await store.find(request)


_EMPTY_STATISTICS = {
    "total_blogs": 0,
    "total_views": 0,
    "total_likes": 0,
    "avg_reading_time": 0,
    "avg_view_count": 0,
}


async def blog_statistics(
    store: DocumentStore, filters: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Totals and averages over published blogs (optionally filtered)."""
    pipeline = [
        {"$match": {"status": "published", **(filters or {})}},
        {
            "$group": {
                "_id": None,
                "total_blogs": {"$sum": 1},
                "total_views": {"$sum": "$view_count"},
                "total_likes": {"$sum": {"$size": {"$ifNull": ["$likes", []]}}},
                "avg_reading_time": {"$avg": "$reading_time"},
                "avg_view_count": {"$avg": "$view_count"},
            }
        },
        {
            "$project": {
                "_id": 0,
                "total_blogs": 1,
                "total_views": 1,
                "total_likes": 1,
                "avg_reading_time": {"$round": ["$avg_reading_time", 1]},
                "avg_view_count": {"$round": ["$avg_view_count", 1]},
            }
        },
    ]

    results = await store.aggregate(pipeline)
    return results[0] if results else dict(_EMPTY_STATISTICS)


async def category_statistics(store: DocumentStore) -> list[dict[str, Any]]:
    """Per-category counts, views, likes and reading time, busiest first."""
    pipeline = [
        {"$match": {"status": "published"}},
        {
            "$group": {
                "_id": "$category",
                "count": {"$sum": 1},
                "total_views": {"$sum": "$view_count"},
                "total_likes": {"$sum": {"$size": {"$ifNull": ["$likes", []]}}},
                "avg_reading_time": {"$avg": "$reading_time"},
            }
        },
        {
            "$project": {
                "_id": 0,
                "category": "$_id",
                "count": 1,
                "total_views": 1,
                "total_likes": 1,
                "avg_reading_time": {"$round": ["$avg_reading_time", 1]},
            }
        },
        {"$sort": {"count": -1}},
    ]
    return await store.aggregate(pipeline)
