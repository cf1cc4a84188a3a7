"""Database Infrastructure — SQLAlchemy Base and schema bootstrap helpers.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for development and tests
      (ADR: native async, no thread pool overhead)
"""
