"""Document store interface used by every service, plus the in-memory backend.

Services only need whole-collection reads, lookups by id or field, inserts,
batch upserts and batch deletes. Each call is one read or one write; callers
validate everything first and then issue a single write so a failed
operation leaves the store untouched.
"""

import copy
import enum
from abc import ABC, abstractmethod
from typing import Any

from mobileshop.core.exceptions import ConflictError


class Collection(str, enum.Enum):
    PRODUCTS = "products"
    CATEGORIES = "categories"
    ALERTS = "alerts"
    ALERT_SETTINGS = "alert_settings"


class DocumentStore(ABC):
    @abstractmethod
    async def find_all(self, collection: Collection) -> list[dict]:
        ...

    @abstractmethod
    async def find_by_id(self, collection: Collection, doc_id: str) -> dict | None:
        ...

    async def find_by_field(self, collection: Collection, field: str, value: Any) -> list[dict]:
        return [doc for doc in await self.find_all(collection) if doc.get(field) == value]

    @abstractmethod
    async def insert(self, collection: Collection, doc: dict) -> dict:
        """Insert a new document. Raises ConflictError if the id is taken."""

    @abstractmethod
    async def replace_many(self, collection: Collection, docs: list[dict]) -> None:
        """Upsert a batch of documents by id in a single write."""

    @abstractmethod
    async def delete_many(self, collection: Collection, ids: list[str]) -> int:
        """Remove documents by id, returning how many existed."""


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._collections: dict[str, dict[str, dict]] = {c.value: {} for c in Collection}

    def _docs(self, collection: Collection) -> dict[str, dict]:
        return self._collections[Collection(collection).value]

    async def find_all(self, collection: Collection) -> list[dict]:
        return [copy.deepcopy(doc) for doc in self._docs(collection).values()]

    async def find_by_id(self, collection: Collection, doc_id: str) -> dict | None:
        doc = self._docs(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert(self, collection: Collection, doc: dict) -> dict:
        docs = self._docs(collection)
        if doc["id"] in docs:
            raise ConflictError(f"Document '{doc['id']}' already exists in {collection.value}")
        docs[doc["id"]] = copy.deepcopy(doc)
        return copy.deepcopy(doc)

    async def replace_many(self, collection: Collection, docs: list[dict]) -> None:
        target = self._docs(collection)
        for doc in docs:
            target[doc["id"]] = copy.deepcopy(doc)

    async def delete_many(self, collection: Collection, ids: list[str]) -> int:
        docs = self._docs(collection)
        removed = 0
        for doc_id in ids:
            if docs.pop(doc_id, None) is not None:
                removed += 1
        return removed
