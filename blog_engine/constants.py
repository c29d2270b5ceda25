"""
Constants for blog_engine.

Shared defaults used across the connection, query and health layers.
"""

from typing import Final

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

DEFAULT_DB_NAME: Final[str] = "blog"
"""Database name used when DB_NAME is not set."""

DEFAULT_MAX_POOL_SIZE: Final[int] = 10
"""Default maximum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 30000
"""Server selection timeout in milliseconds."""

DEFAULT_CONNECT_TIMEOUT_MS: Final[int] = 30000
"""Socket connect timeout in milliseconds."""

DEFAULT_SOCKET_TIMEOUT_MS: Final[int] = 45000
"""Socket read/write timeout in milliseconds."""

DEFAULT_CONNECT_MAX_RETRIES: Final[int] = 5
"""Number of retries after the first failed connection attempt."""

DEFAULT_CONNECT_RETRY_DELAY: Final[float] = 5.0
"""Fixed delay between connection attempts (seconds)."""

# ============================================================================
# COLLECTION NAMES
# ============================================================================

USERS_COLLECTION: Final[str] = "users"
BLOGS_COLLECTION: Final[str] = "blogs"
CATEGORIES_COLLECTION: Final[str] = "categories"

# ============================================================================
# QUERY CONSTANTS
# ============================================================================

DEFAULT_PAGE_SIZE: Final[int] = 10
"""Default number of records per page."""

DEFAULT_RELATED_LIMIT: Final[int] = 5
"""Default number of related posts returned."""

SLOW_QUERY_THRESHOLD_MS: Final[float] = 1000.0
"""Queries slower than this are logged as warnings."""

BLOG_LIST_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "slug",
    "excerpt",
    "cover_image",
    "category",
    "tags",
    "status",
    "featured",
    "reading_time",
    "view_count",
    "like_count",
    "author",
    "created_at",
    "updated_at",
)
"""Fields returned for blog list views."""

BLOG_CARD_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "slug",
    "excerpt",
    "cover_image",
    "category",
    "tags",
    "reading_time",
    "view_count",
    "like_count",
    "author",
    "created_at",
)
"""Fields returned for related/popular blog cards."""

AUTHOR_SUMMARY_FIELDS: Final[tuple[str, ...]] = (
    "username",
    "profile.first_name",
    "profile.last_name",
    "profile.avatar",
)
"""Author fields resolved inline into blog results."""

TEXT_SEARCH_FIELDS: Final[tuple[str, ...]] = ("title", "content", "excerpt")
"""Fields covered by the blog text index and the regex fallback."""

TIMEFRAME_DAYS: Final[dict[str, int]] = {"week": 7, "month": 30, "year": 365}
"""Lookback windows accepted by popular_blogs."""

# ============================================================================
# HEALTH CHECK CONSTANTS
# ============================================================================

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "MONGODB_URI",
    "JWT_SECRET",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "S3_BUCKET_NAME",
    "AWS_REGION",
)
"""Environment variables a production deployment must define."""

MIN_JWT_SECRET_LENGTH: Final[int] = 32
"""Minimum length of the token signing secret."""

MAX_PROCESS_MEMORY_BYTES: Final[int] = 1024 * 1024 * 1024  # 1 GiB
"""Resident memory above which the system check fails."""

# ============================================================================
# RETRY CONSTANTS
# ============================================================================

DEFAULT_RETRY_ATTEMPTS: Final[int] = 3
"""Default total attempts for retry()."""

DEFAULT_RETRY_BASE_DELAY: Final[float] = 1.0
"""Default base delay for retry() (seconds)."""

RETRYABLE_CLIENT_STATUSES: Final[frozenset[int]] = frozenset({408, 429})
"""4xx statuses that are still worth retrying (timeout, rate limited)."""
