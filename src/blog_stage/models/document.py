# src/blog_stage/models/document.py
"""Collection-scoped document storage."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from blog_stage.db.session import Base
from blog_stage.db.time import utcnow


class Document(Base):
    """A schemaless record addressed by ``(collection, doc_id)``.

    Accounts, posts, logs and tickets all live here; their shapes are enforced
    by the pydantic schemas, not by the table.
    """

    __tablename__ = "document"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    doc_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (Index("ix_document_collection_created", "collection", "created_at"),)
