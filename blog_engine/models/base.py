"""
Base record type.

Records are dataclasses stored as MongoDB documents. ``id`` maps to ``_id``
and timestamps are set by ``prepare_for_save``.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

from bson import ObjectId

E = TypeVar("E", bound="Entity")


@dataclass
class Entity:
    """
    Base class for persisted records.

    Example:
        @dataclass
        class Tag(Entity):
            name: str = ""
    """

    id: str | None = None
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)

    def validate(self) -> None:
        """Raise FieldValidationError when a field breaks its rules."""

    def prepare_for_save(self, now: datetime | None = None) -> None:
        """
        Fill derived fields and timestamps, then validate.

        Args:
            now: Timestamp to use (defaults to current UTC time)
        """
        now = now or datetime.now(timezone.utc)
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now
        self.validate()

    @property
    def is_new(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        """Convert the record to a MongoDB document."""
        data = {}
        for key, value in self.__dict__.items():
            if value is None:
                continue
            if key == "id":
                data["_id"] = ObjectId(value) if ObjectId.is_valid(value) else value
            else:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls: type[E], data: dict[str, Any] | None) -> E | None:
        """Create a record from a MongoDB document, ignoring unknown fields."""
        if data is None:
            return None

        data = dict(data)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))

        field_names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in field_names})
