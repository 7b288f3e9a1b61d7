"""
quorum.database.models — SQLAlchemy 2.0 Data Models
=====================================================

The SQL-backed document store keeps every record (boards, suggestions,
economy accounts) as a JSON body in a single ``documents`` table keyed by
``(collection, key)``.  The core only ever issues whole-field patches, so a
document table is all the schema it needs.

Tables:
- documents — one row per stored document, with a monotonically
  increasing ``version`` bumped on every write
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Quorum ORM models."""


# ---------------------------------------------------------------------------
# Documents — key/value JSON store
# ---------------------------------------------------------------------------
class Document(Base):
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(50), primary_key=True)
    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    body: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_documents_collection", "collection"),
        Index("ix_documents_body", "body", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return f"<Document {self.collection}/{self.key} v{self.version}>"
