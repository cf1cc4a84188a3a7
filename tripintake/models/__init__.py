"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Document is the only table; collections are a column, not tables

Design Decisions:
    - Models imported here so Base.metadata is complete before create_all or
      alembic autogenerate runs (ADR: standard SQLAlchemy pattern)
"""

from tripintake.models.document import Document  # noqa: F401
