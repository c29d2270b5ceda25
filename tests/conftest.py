"""
Pytest configuration and shared fixtures for blog_engine tests.

This module provides:
- Mock Motor client fixtures
- Blog/user test data
- Configuration fixtures
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient

from blog_engine.config import BlogConfig
from blog_engine.observability import get_metrics_collector

# ============================================================================
# METRICS
# ============================================================================


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty global metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


@pytest.fixture
def mock_mongo_client() -> MagicMock:
    """Create a mock Motor client whose ping succeeds."""
    client = MagicMock(spec=AsyncIOMotorClient)
    client.admin = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = MagicMock()

    databases: Dict[str, MagicMock] = {}

    def get_database(self, db_name):
        if db_name not in databases:
            db = MagicMock()
            db.name = db_name
            databases[db_name] = db
        return databases[db_name]

    client.__getitem__ = get_database
    return client


# ============================================================================
# CONFIGURATION
# ============================================================================


@pytest.fixture
def blog_config() -> BlogConfig:
    """Fully populated configuration (nothing read from the environment)."""
    return BlogConfig(
        mongodb_uri="mongodb://localhost:27017",
        db_name="test_blog",
        jwt_secret="s" * 40,
        aws_access_key_id="AKIATEST",
        aws_secret_access_key="secret",
        aws_region="us-east-1",
        s3_bucket_name="test-bucket",
        environment="test",
        max_pool_size=5,
        connect_max_retries=2,
        connect_retry_delay=0,
    )


# ============================================================================
# TEST DATA
# ============================================================================


@pytest.fixture
def author() -> Dict[str, Any]:
    return {
        "_id": ObjectId(),
        "username": "jane_doe",
        "email": "jane@example.com",
        "password": "$2b$12$hash",
        "profile": {"first_name": "Jane", "last_name": "Doe", "avatar": "jane.png", "bio": "Hi"},
    }


@pytest.fixture
def blog_documents(author) -> List[Dict[str, Any]]:
    """Five blogs with distinct creation times, newest last."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def blog(title, category, tags, status="published", views=0, likes=0, days=0, **extra):
        doc = {
            "_id": ObjectId(),
            "title": title,
            "slug": title.lower().replace(" ", "-"),
            "content": f"{title} content body",
            "excerpt": f"About {title}",
            "category": category,
            "tags": tags,
            "status": status,
            "featured": False,
            "author": author["_id"],
            "view_count": views,
            "likes": [ObjectId() for _ in range(likes)],
            "like_count": likes,
            "reading_time": 1,
            "created_at": base + timedelta(days=days),
        }
        doc.update(extra)
        return doc

    return [
        blog("Python Tips", "programming", ["python"], views=50, likes=3, days=0),
        blog("Async Python", "programming", ["python", "async"], views=50, likes=7, days=1),
        blog("Baking Bread", "cooking", ["bread"], views=10, days=2, featured=True),
        blog("Draft Post", "programming", ["python"], status="draft", views=500, days=3),
        blog("Rust Notes", "programming", ["rust"], views=5, days=4),
    ]
