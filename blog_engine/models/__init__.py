"""
Persisted record types for users, blog posts and categories.
"""

from .base import Entity
from .blog import BLOG_STATUSES, Blog, reading_time
from .category import Category
from .indexes import BLOG_TEXT_INDEX, INDEXES, ensure_indexes
from .user import PUBLIC_USER_PROJECTION, USER_ROLES, User
from .validation import FieldValidationError, slugify

__all__ = [
    "Entity",
    "User",
    "Blog",
    "Category",
    "USER_ROLES",
    "BLOG_STATUSES",
    "PUBLIC_USER_PROJECTION",
    "FieldValidationError",
    "slugify",
    "reading_time",
    "INDEXES",
    "BLOG_TEXT_INDEX",
    "ensure_indexes",
]
