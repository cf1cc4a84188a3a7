"""Schema Bootstrap — creates tables directly on an engine, outside alembic.

Invariants:
    - Uses the same metadata alembic migrates (Base + every model)
    - Meant for local SQLite runs and test fixtures, never production

Design Decisions:
    - Separate from infrastructure/database.py: this is a convenience for
      non-migrated contexts (ADR: alembic owns production schema)
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from tripintake.db.base import Base
import tripintake.models  # noqa: F401  (populates Base.metadata)


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
