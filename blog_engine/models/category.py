"""
Category records.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .base import Entity
from .validation import FieldValidationError, max_length, min_value, require, slugify

HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")

DEFAULT_CATEGORY_COLOR = "#6366f1"


@dataclass
class Category(Entity):
    name: str = ""
    slug: str | None = None
    description: str | None = None
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str | None = None
    is_active: bool = True
    blog_count: int = 0
    created_by: Any = None

    def __post_init__(self) -> None:
        self.name = self.name.strip()

    def prepare_for_save(self, now: datetime | None = None) -> None:
        if not self.slug:
            self.slug = slugify(self.name)
        super().prepare_for_save(now)

    def validate(self) -> None:
        require(self.name, "name", "Category name")
        max_length(self.name, 50, "name", "Category name")
        max_length(self.description, 200, "description", "Description")
        if not HEX_COLOR_PATTERN.match(self.color):
            raise FieldValidationError("color", "Please provide a valid hex color")
        min_value(self.blog_count, 0, "blog_count", "Blog count")
        require(self.created_by, "created_by", "Creator")
