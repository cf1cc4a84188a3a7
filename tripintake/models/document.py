"""Document ORM — one JSON document per (collection, key), the store's only table.

Invariants:
    - (collection, key) is the composite primary key: one document per key
    - data is always a JSON object (never a scalar or array)
    - updated_at moves on every write; created_at never does

Design Decisions:
    - Single generic table over one table per collection: the intake service
      treats the store as a key-value document store, so its schema never
      changes when a collection is added (ADR: single-document atomicity only)
    - JSON column: portable across PostgreSQL (production) and SQLite (tests)
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from tripintake.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """A stored document in a named collection."""
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now,
    )
