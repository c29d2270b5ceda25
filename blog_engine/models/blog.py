"""
Blog post records.
"""

import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import Entity
from .validation import max_length, min_value, one_of, require, slugify

BLOG_STATUSES = ("draft", "published", "archived")

WORDS_PER_MINUTE = 200


def reading_time(content: str) -> int:
    """Minutes needed to read ``content`` at 200 words per minute."""
    words = content.split()
    return math.ceil(len(words) / WORDS_PER_MINUTE)


@dataclass
class Blog(Entity):
    title: str = ""
    slug: str | None = None
    content: str = ""
    excerpt: str = ""
    cover_image: dict[str, str] = field(default_factory=lambda: {"url": "", "alt": ""})
    author: Any = None
    category: str = ""
    tags: list[str] = field(default_factory=list)
    status: str = "draft"
    featured: bool = False
    seo_metadata: dict[str, Any] = field(default_factory=dict)
    reading_time: int = 0
    view_count: int = 0
    likes: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.title = self.title.strip()
        self.category = self.category.strip()
        self.tags = [tag.strip().lower() for tag in self.tags if tag and tag.strip()]

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def toggle_like(self, user_id: Any) -> bool:
        """
        Add or remove a like from ``user_id``.

        Returns:
            True if the blog is now liked by the user
        """
        if user_id in self.likes:
            self.likes.remove(user_id)
            return False
        self.likes.append(user_id)
        return True

    def set_title(self, title: str) -> None:
        """
        Change the title.

        A changed title clears the slug so the next save derives a new one.
        Assigning ``title`` directly keeps the stored slug.
        """
        title = title.strip()
        if title != self.title:
            self.slug = None
        self.title = title

    def prepare_for_save(self, now: datetime | None = None) -> None:
        if self.is_new and not self.slug:
            # Suffix keeps slugs of identically titled posts apart
            self.slug = f"{slugify(self.title)}-{str(int(time.time() * 1000))[-6:]}"
        elif self.slug is None:
            self.slug = slugify(self.title)
        self.reading_time = reading_time(self.content)
        super().prepare_for_save(now)

    def validate(self) -> None:
        require(self.title, "title", "Blog title")
        max_length(self.title, 200, "title", "Title")
        require(self.content, "content", "Blog content")
        require(self.excerpt, "excerpt", "Blog excerpt")
        max_length(self.excerpt, 500, "excerpt", "Excerpt")
        require(self.author, "author", "Author")
        require(self.category, "category", "Category")
        one_of(self.status, BLOG_STATUSES, "status", "Status")
        max_length(
            self.seo_metadata.get("meta_title"), 60, "seo_metadata.meta_title", "Meta title"
        )
        max_length(
            self.seo_metadata.get("meta_description"),
            160,
            "seo_metadata.meta_description",
            "Meta description",
        )
        min_value(self.reading_time, 0, "reading_time", "Reading time")
        min_value(self.view_count, 0, "view_count", "View count")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        # Stored so popularity can be sorted on in the database
        data["like_count"] = self.like_count
        return data
