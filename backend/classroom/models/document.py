"""Document ORM — one row per stored document, scoped by collection.

Invariants:
    - id is UUID primary key, assigned on insert and never changed
    - collection is one of students | teachers | courses
    - body holds every field except the id; references stored as id strings
    - version increments on every UPDATE; a write against a stale version
      raises StaleDataError instead of overwriting

Design Decisions:
    - Single table for all collections: the store contract is document-shaped,
      cross-references live inside bodies, nothing is enforced by foreign keys
    - JSON column for body: same column type on SQLite and PostgreSQL
    - Optimistic version_id_col over row locks: SQLite has no SELECT ... FOR UPDATE
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import Uuid

from classroom.db.base import Base


class Document(Base):
    """A stored document in one of the three collections."""
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_collection", "collection"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    collection: Mapped[str] = mapped_column(String(32), nullable=False)
    body: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __mapper_args__ = {"version_id_col": version}
