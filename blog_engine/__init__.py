"""
blog_engine - data and operations layer for a MongoDB-backed blog CMS.

Connection management with retry, paginated blog queries over a storage
abstraction, deployment health checks and user-facing error handling.
"""

from .config import BlogConfig
from .database import ConnectionManager, ConnectionStatus
from .errors import AppError, ErrorKind, classify_exception, retry, user_message
from .exceptions import (
    BlogEngineError,
    ConfigurationError,
    ConnectionRetryError,
    QueryError,
)
from .observability import HealthChecker, build_health_checker
from .query import (
    MongoDocumentStore,
    Page,
    QueryRequest,
    SearchParams,
    paginate,
    search_blogs,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "BlogConfig",
    # Database
    "ConnectionManager",
    "ConnectionStatus",
    # Queries
    "MongoDocumentStore",
    "QueryRequest",
    "Page",
    "SearchParams",
    "paginate",
    "search_blogs",
    # Health
    "HealthChecker",
    "build_health_checker",
    # Errors
    "AppError",
    "ErrorKind",
    "classify_exception",
    "user_message",
    "retry",
    "BlogEngineError",
    "ConfigurationError",
    "ConnectionRetryError",
    "QueryError",
]
