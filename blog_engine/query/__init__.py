"""
Query helpers.

Pagination, blog search and aggregate statistics over an explicit
storage abstraction.
"""

from .blogs import (
    AUTHOR_POPULATION,
    SearchParams,
    blog_statistics,
    build_search_filter,
    category_statistics,
    popular_blogs,
    related_blogs,
    search_blogs,
)
from .monitoring import monitor_query
from .pagination import Page, PaginationInfo, paginate
from .store import (
    DocumentStore,
    InMemoryDocumentStore,
    MongoDocumentStore,
    Population,
    QueryRequest,
    projection_for,
)

__all__ = [
    # Storage
    "DocumentStore",
    "MongoDocumentStore",
    "InMemoryDocumentStore",
    "QueryRequest",
    "Population",
    "projection_for",
    # Pagination
    "Page",
    "PaginationInfo",
    "paginate",
    # Blogs
    "AUTHOR_POPULATION",
    "SearchParams",
    "build_search_filter",
    "search_blogs",
    "related_blogs",
    "popular_blogs",
    "blog_statistics",
    "category_statistics",
    # Monitoring
    "monitor_query",
]
