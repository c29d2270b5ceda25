"""
Field validation helpers shared by the record types.
"""

import re
from typing import Any, Dict, Optional

from ..exceptions import BlogEngineError


class FieldValidationError(BlogEngineError):
    """
    Raised when a record field violates its rules.

    Attributes:
        field: Name of the offending field
        message: Error message
    """

    def __init__(
        self, field: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        context = context or {}
        context["field"] = field
        super().__init__(message, context=context)
        self.field = field


def require(value: Any, field: str, label: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise FieldValidationError(field, f"{label} is required")


def max_length(value: str | None, limit: int, field: str, label: str) -> None:
    if value is not None and len(value) > limit:
        raise FieldValidationError(field, f"{label} cannot exceed {limit} characters")


def min_value(value: int | float, minimum: int | float, field: str, label: str) -> None:
    if value < minimum:
        raise FieldValidationError(field, f"{label} cannot be negative")


def one_of(value: str, choices: tuple[str, ...], field: str, label: str) -> None:
    if value not in choices:
        raise FieldValidationError(field, f"{label} must be one of: {', '.join(choices)}")


def slugify(text: str) -> str:
    """
    Lower-case ASCII slug with words joined by single hyphens.

    Example:
        slugify("  Hello, World_of  Python! ")  # "hello-world-of-python"
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug, flags=re.ASCII)
    return slug.strip("-")
