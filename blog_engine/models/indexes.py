"""
Index declarations for the blog collections.

Unique indexes enforce username/email/slug uniqueness; the blogs text
index backs free-text search.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, TEXT, IndexModel

from ..constants import BLOGS_COLLECTION, CATEGORIES_COLLECTION, USERS_COLLECTION
from ..observability import timed_operation

logger = logging.getLogger(__name__)

BLOG_TEXT_INDEX = "blog_text_search"

INDEXES: dict[str, list[IndexModel]] = {
    USERS_COLLECTION: [
        IndexModel([("username", ASCENDING)], unique=True),
        IndexModel([("email", ASCENDING)], unique=True),
        IndexModel([("role", ASCENDING), ("is_active", ASCENDING)]),
    ],
    BLOGS_COLLECTION: [
        IndexModel([("slug", ASCENDING)], unique=True),
        IndexModel([("status", ASCENDING), ("created_at", DESCENDING)]),
        IndexModel([("status", ASCENDING), ("featured", ASCENDING), ("created_at", DESCENDING)]),
        IndexModel([("status", ASCENDING), ("category", ASCENDING), ("created_at", DESCENDING)]),
        IndexModel([("status", ASCENDING), ("tags", ASCENDING), ("created_at", DESCENDING)]),
        IndexModel([("status", ASCENDING), ("view_count", DESCENDING)]),
        IndexModel([("author", ASCENDING), ("status", ASCENDING), ("created_at", DESCENDING)]),
        IndexModel(
            [
                ("title", TEXT),
                ("content", TEXT),
                ("excerpt", TEXT),
                ("seo_metadata.keywords", TEXT),
            ],
            weights={"title": 10, "excerpt": 5, "seo_metadata.keywords": 3, "content": 1},
            name=BLOG_TEXT_INDEX,
        ),
    ],
    CATEGORIES_COLLECTION: [
        IndexModel([("name", ASCENDING)], unique=True),
        IndexModel([("slug", ASCENDING)], unique=True),
        IndexModel([("is_active", ASCENDING)]),
    ],
}


@timed_operation("db.ensure_indexes")
async def ensure_indexes(database: AsyncIOMotorDatabase) -> dict[str, list[str]]:
    """
    Create every declared index (existing ones are left as they are).

    Args:
        database: Target database

    Returns:
        Index names per collection
    """
    created: dict[str, list[str]] = {}
    for collection_name, models in INDEXES.items():
        created[collection_name] = await database[collection_name].create_indexes(models)
        logger.info(f"Ensured {len(models)} indexes on '{collection_name}'")
    return created
