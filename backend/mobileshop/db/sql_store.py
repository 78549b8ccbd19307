"""Document store backed by the `documents` table (PostgreSQL JSONB via asyncpg)."""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mobileshop.core.exceptions import ConflictError
from mobileshop.db.store import Collection, DocumentStore
from mobileshop.models.document import Document

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_all(self, collection: Collection) -> list[dict]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Document)
                .where(Document.collection == collection.value)
                .order_by(Document.created_at)
            )
            return [dict(row.data) for row in result.scalars().all()]

    async def find_by_id(self, collection: Collection, doc_id: str) -> dict | None:
        async with self._session_factory() as session:
            row = await session.get(Document, (collection.value, doc_id))
            return dict(row.data) if row else None

    async def find_by_field(self, collection: Collection, field: str, value: Any) -> list[dict]:
        # data->>'field' matches the expression indexes on parentId / category
        column = Document.data[field].as_string()
        condition = column.is_(None) if value is None else column == str(value)
        async with self._session_factory() as session:
            result = await session.execute(
                select(Document)
                .where(Document.collection == collection.value, condition)
                .order_by(Document.created_at)
            )
            return [dict(row.data) for row in result.scalars().all()]

    async def insert(self, collection: Collection, doc: dict) -> dict:
        async with self._session_factory() as session:
            existing = await session.get(Document, (collection.value, doc["id"]))
            if existing:
                raise ConflictError(f"Document '{doc['id']}' already exists in {collection.value}")
            session.add(Document(collection=collection.value, id=doc["id"], data=dict(doc)))
            await session.commit()
        return doc

    async def replace_many(self, collection: Collection, docs: list[dict]) -> None:
        if not docs:
            return
        async with self._session_factory() as session:
            for doc in docs:
                row = await session.get(Document, (collection.value, doc["id"]))
                if row:
                    row.data = dict(doc)
                else:
                    session.add(Document(collection=collection.value, id=doc["id"], data=dict(doc)))
            await session.commit()
        logger.debug(f"Wrote {len(docs)} document(s) to {collection.value}")

    async def delete_many(self, collection: Collection, ids: list[str]) -> int:
        if not ids:
            return 0
        async with self._session_factory() as session:
            result = await session.execute(
                delete(Document).where(
                    Document.collection == collection.value,
                    Document.id.in_(ids),
                )
            )
            await session.commit()
            return result.rowcount
