"""
Storage abstraction for the query helpers.

Queries are described by an explicit QueryRequest (filter, sort, projection,
pagination, population) and executed by a DocumentStore. The query helpers
never touch a driver cursor directly, so they run unchanged against Motor
or the in-memory store used in tests.
"""

import copy
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

SortSpec = list[tuple[str, Any]]

TEXT_SCORE = {"$meta": "textScore"}


@dataclass
class Population:
    """
    Resolve a referenced id stored at ``path`` into the referenced document.

    Attributes:
        path: Field holding the reference (e.g. "author")
        collection: Collection the reference points into
        select: Fields to keep from the referenced document (all when empty)
    """

    path: str
    collection: str
    select: tuple[str, ...] = ()


@dataclass
class QueryRequest:
    """A single find request against one collection."""

    filter: dict[str, Any] = field(default_factory=dict)
    sort: SortSpec = field(default_factory=list)
    projection: dict[str, Any] | None = None
    skip: int = 0
    limit: int = 0
    populate: list[Population] = field(default_factory=list)


def projection_for(fields: tuple[str, ...] | list[str] | None) -> dict[str, Any] | None:
    """Build an inclusion projection from a list of field names."""
    if not fields:
        return None
    return {name: 1 for name in fields}


class DocumentStore(ABC):
    """Read interface over one collection."""

    @abstractmethod
    async def find(self, request: QueryRequest) -> list[dict[str, Any]]:
        """Run a find request and return the matching documents."""

    @abstractmethod
    async def count(self, filter: dict[str, Any] | None = None) -> int:
        """Count documents matching a filter."""

    @abstractmethod
    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Run an aggregation pipeline."""

    @abstractmethod
    async def has_text_index(self) -> bool:
        """Whether the collection has a text index for $text queries."""


class MongoDocumentStore(DocumentStore):
    """
    Motor-backed DocumentStore.

    Example:
        store = MongoDocumentStore(manager.database, "blogs")
        docs = await store.find(QueryRequest(filter={"status": "published"}, limit=10))
    """

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str):
        self._database = database
        self._collection = database[collection_name]
        self.collection_name = collection_name

    async def find(self, request: QueryRequest) -> list[dict[str, Any]]:
        cursor = self._collection.find(request.filter, projection=request.projection)
        if request.sort:
            cursor = cursor.sort(request.sort)
        if request.skip > 0:
            cursor = cursor.skip(request.skip)
        if request.limit > 0:
            cursor = cursor.limit(request.limit)

        docs = await cursor.to_list(length=request.limit or None)
        for population in request.populate:
            await self._populate(docs, population)
        return docs

    async def _populate(self, docs: list[dict[str, Any]], population: Population) -> None:
        ids = {doc[population.path] for doc in docs if doc.get(population.path) is not None}
        if not ids:
            return

        cursor = self._database[population.collection].find(
            {"_id": {"$in": list(ids)}}, projection=projection_for(population.select)
        )
        referenced = {ref["_id"]: ref for ref in await cursor.to_list(length=None)}
        for doc in docs:
            if population.path in doc:
                doc[population.path] = referenced.get(doc[population.path])

    async def count(self, filter: dict[str, Any] | None = None) -> int:
        return await self._collection.count_documents(filter or {})

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        cursor = self._collection.aggregate(pipeline)
        return await cursor.to_list(length=None)

    async def has_text_index(self) -> bool:
        indexes = await self._collection.index_information()
        return any(
            direction == "text"
            for index in indexes.values()
            for _field, direction in index.get("key", [])
        )


# ============================================================================
# IN-MEMORY STORE
# ============================================================================

_MISSING = object()


def _get_path(doc: dict[str, Any], path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_path(doc: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        doc = doc.setdefault(part, {})
    doc[parts[-1]] = value


class InMemoryDocumentStore(DocumentStore):
    """
    List-backed DocumentStore for tests and local tooling.

    Supports equality, $in, $ne, $gt/$gte/$lt/$lte, $regex (with the "i"
    option), $or, and $text when ``text_fields`` is given. Aggregation
    handles $match, $sort and $limit stages.
    """

    def __init__(
        self,
        documents: list[dict[str, Any]] | None = None,
        text_fields: tuple[str, ...] = (),
        references: dict[str, list[dict[str, Any]]] | None = None,
    ):
        self._documents = [copy.deepcopy(doc) for doc in documents or []]
        self._text_fields = text_fields
        self._references = references or {}

    def insert(self, doc: dict[str, Any]) -> None:
        self._documents.append(copy.deepcopy(doc))

    async def find(self, request: QueryRequest) -> list[dict[str, Any]]:
        matches = [
            copy.deepcopy(doc) for doc in self._documents if self._matches(doc, request.filter)
        ]

        text = request.filter.get("$text")
        if text is not None:
            for doc in matches:
                doc["score"] = self._text_score(doc, text["$search"])

        matches = self._sort(matches, request.sort)
        if request.skip > 0:
            matches = matches[request.skip :]
        if request.limit > 0:
            matches = matches[: request.limit]

        for population in request.populate:
            self._populate(matches, population)

        return [self._project(doc, request.projection) for doc in matches]

    async def count(self, filter: dict[str, Any] | None = None) -> int:
        return sum(1 for doc in self._documents if self._matches(doc, filter or {}))

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        docs = [copy.deepcopy(doc) for doc in self._documents]
        for stage in pipeline:
            operator, spec = next(iter(stage.items()))
            if operator == "$match":
                docs = [doc for doc in docs if self._matches(doc, spec)]
            elif operator == "$sort":
                docs = self._sort(docs, list(spec.items()))
            elif operator == "$limit":
                docs = docs[:spec]
            else:
                raise NotImplementedError(f"In-memory aggregation does not support {operator}")
        return docs

    async def has_text_index(self) -> bool:
        return bool(self._text_fields)

    def _matches(self, doc: dict[str, Any], filter: dict[str, Any]) -> bool:
        for key, condition in filter.items():
            if key == "$or":
                if not any(self._matches(doc, sub) for sub in condition):
                    return False
            elif key == "$text":
                if not self._text_score(doc, condition["$search"]):
                    return False
            elif not self._match_value(_get_path(doc, key), condition):
                return False
        return True

    def _match_value(self, value: Any, condition: Any) -> bool:
        if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
            return all(
                self._apply_operator(value, op, arg, condition)
                for op, arg in condition.items()
                if op != "$options"
            )
        if isinstance(value, list) and not isinstance(condition, list):
            return condition in value
        return value is not _MISSING and value == condition

    def _apply_operator(self, value: Any, op: str, arg: Any, condition: dict[str, Any]) -> bool:
        present = value is not _MISSING
        if op == "$in":
            if isinstance(value, list):
                return any(item in arg for item in value)
            return present and value in arg
        if op == "$ne":
            return not present or value != arg
        if op in ("$gt", "$gte", "$lt", "$lte"):
            if not present or value is None:
                return False
            return {
                "$gt": value > arg,
                "$gte": value >= arg,
                "$lt": value < arg,
                "$lte": value <= arg,
            }[op]
        if op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            return isinstance(value, str) and re.search(arg, value, flags) is not None
        raise NotImplementedError(f"In-memory filter does not support {op}")

    def _text_score(self, doc: dict[str, Any], search: str) -> int:
        terms = [term.lower() for term in search.split()]
        score = 0
        for name in self._text_fields:
            value = _get_path(doc, name)
            if isinstance(value, str):
                lowered = value.lower()
                score += sum(lowered.count(term) for term in terms)
        return score

    def _sort(self, docs: list[dict[str, Any]], sort: SortSpec) -> list[dict[str, Any]]:
        # Stable sorts applied from the least significant key
        for name, direction in reversed(sort):
            reverse = direction == TEXT_SCORE or direction == -1

            def sort_key(doc, name=name):
                value = _get_path(doc, name)
                if value is _MISSING or value is None:
                    return (0, 0)
                return (1, value)

            docs = sorted(docs, key=sort_key, reverse=reverse)
        return docs

    def _populate(self, docs: list[dict[str, Any]], population: Population) -> None:
        referenced = {
            ref["_id"]: ref for ref in self._references.get(population.collection, [])
        }
        projection = projection_for(population.select)
        for doc in docs:
            if population.path in doc:
                ref = referenced.get(doc[population.path])
                doc[population.path] = (
                    self._project(copy.deepcopy(ref), projection) if ref is not None else None
                )

    def _project(self, doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
        if not projection:
            return doc
        projected: dict[str, Any] = {}
        if projection.get("_id", 1) and "_id" in doc:
            projected["_id"] = doc["_id"]
        for name, include in projection.items():
            if name == "_id" or not include:
                continue
            value = _get_path(doc, name)
            if value is not _MISSING:
                _set_path(projected, name, value)
        return projected
