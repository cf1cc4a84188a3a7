"""SQL Document Store — key-value documents over the `documents` table.

Invariants:
    - Every operation is bounded by store_timeout; expiry raises StoreUnavailableError
    - Every database fault surfaces as StoreUnavailableError (via DatabaseSessionManager)
    - set() is last-write-wins: an upsert, never a duplicate-key failure
    - update() is a shallow merge on ONE document inside one transaction, and
      raises ResourceNotFoundError when the document does not exist
    - Values are stored as JSON: instants become ISO-8601 strings

Design Decisions:
    - Dialect upsert (ON CONFLICT DO UPDATE) for set(): racing first writes for
      the same key both succeed and the later one wins, as with any single-document
      write (ADR: no multi-document transactions)
    - update() locks the row (SELECT ... FOR UPDATE) where the dialect supports it
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic_core import to_jsonable_python
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from tripintake.core.errors import ResourceNotFoundError, StoreUnavailableError
from tripintake.infrastructure.database import DatabaseSessionManager
from tripintake.models.document import Document

logger = logging.getLogger(__name__)

T = TypeVar("T")


def encode(value: dict[str, Any]) -> dict[str, Any]:
    """JSON-safe copy of a document (datetimes, enums, tuples converted)."""
    return to_jsonable_python(value)


class SqlDocumentStore:
    """DocumentStore backed by SQLAlchemy async sessions."""

    def __init__(self, db: DatabaseSessionManager, timeout_seconds: float = 5.0):
        self.db = db
        self.timeout_seconds = timeout_seconds

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        return await self._bounded(self._get(collection, key), "get")

    async def set(self, collection: str, key: str, value: dict[str, Any]) -> None:
        await self._bounded(self._set(collection, key, encode(value)), "set")

    async def update(
        self, collection: str, key: str, partial: dict[str, Any],
    ) -> None:
        await self._bounded(self._update(collection, key, encode(partial)), "update")

    async def add(self, collection: str, value: dict[str, Any]) -> str:
        key = uuid.uuid4().hex
        await self._bounded(self._insert(collection, key, encode(value)), "add")
        return key

    async def _bounded(self, operation: Awaitable[T], name: str) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Document store {name} timed out after {self.timeout_seconds}s")
            raise StoreUnavailableError(
                f"timed out after {self.timeout_seconds}s", name,
            )

    async def _get(self, collection: str, key: str) -> dict[str, Any] | None:
        async with self.db.session() as session:
            document = await session.get(Document, (collection, key))
            return dict(document.data) if document else None

    async def _set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        async with self.db.session() as session:
            now = datetime.now(timezone.utc)
            insert = (
                pg_insert if session.bind.dialect.name == "postgresql" else sqlite_insert
            )
            statement = insert(Document).values(
                collection=collection, key=key, data=data,
                created_at=now, updated_at=now,
            )
            statement = statement.on_conflict_do_update(
                index_elements=[Document.collection, Document.key],
                set_={"data": data, "updated_at": now},
            )
            await session.execute(statement)
            await session.commit()

    async def _update(self, collection: str, key: str, partial: dict[str, Any]) -> None:
        async with self.db.session() as session:
            result = await session.execute(
                select(Document)
                .where(Document.collection == collection, Document.key == key)
                .with_for_update(),
            )
            document = result.scalar_one_or_none()
            if document is None:
                raise ResourceNotFoundError(collection, key)
            document.data = {**document.data, **partial}
            await session.commit()

    async def _insert(self, collection: str, key: str, data: dict[str, Any]) -> None:
        async with self.db.session() as session:
            session.add(Document(collection=collection, key=key, data=data))
            await session.commit()
