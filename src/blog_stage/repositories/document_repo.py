"""Data access helpers for the collection-scoped document store."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blog_stage.core.errors import UpstreamUnavailable
from blog_stage.models.document import Document

__all__ = [
    "ACCOUNTS",
    "ACTIVITY_LOG",
    "DELETED_ACCOUNTS",
    "DELETED_POSTS",
    "DocumentRepository",
    "LOGIN_LOG",
    "POSTS",
    "SUPPORT_TICKETS",
]

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"
DELETED_ACCOUNTS = "deleted-accounts"
POSTS = "posts"
DELETED_POSTS = "deleted-posts"
ACTIVITY_LOG = "activity-log"
LOGIN_LOG = "login-log"
SUPPORT_TICKETS = "support-tickets"


class DocumentRepository:
    """Thin wrapper around database access for document collections.

    Every write commits on its own: callers get no multi-document atomicity,
    matching a managed document database. Store failures are rolled back and
    re-raised as :class:`UpstreamUnavailable`.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _fail(self, operation: str, err: SQLAlchemyError) -> UpstreamUnavailable:
        self.session.rollback()
        logger.error("Document store %s failed: %s", operation, err)
        return UpstreamUnavailable(operation)

    def _row(self, collection: str, doc_id: str) -> Document | None:
        return self.session.get(Document, (collection, doc_id))

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return a copy of the document body, or None if absent."""
        try:
            row = self._row(collection, doc_id)
        except SQLAlchemyError as err:
            raise self._fail(f"get {collection}", err) from err
        return dict(row.data) if row is not None else None

    def exists(self, collection: str, doc_id: str) -> bool:
        """Return True if the document is present."""
        return self.get(collection, doc_id) is not None

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or fully replace a document. Rewriting identical data is harmless."""
        try:
            row = self._row(collection, doc_id)
            if row is None:
                self.session.add(Document(collection=collection, doc_id=doc_id, data=dict(data)))
            else:
                row.data = dict(data)
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(f"set {collection}", err) from err

    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex
        try:
            self.session.add(Document(collection=collection, doc_id=doc_id, data=dict(data)))
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(f"add {collection}", err) from err
        return doc_id

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Merge ``fields`` into an existing document.

        Returns:
            The merged body, or None if the document does not exist.
        """
        try:
            row = self._row(collection, doc_id)
            if row is None:
                return None
            merged = {**row.data, **fields}
            row.data = merged
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(f"update {collection}", err) from err
        return dict(merged)

    def delete(self, collection: str, doc_id: str) -> bool:
        """Remove a document; returns False if it was already gone."""
        try:
            row = self._row(collection, doc_id)
            if row is None:
                return False
            self.session.delete(row)
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(f"delete {collection}", err) from err
        return True

    def list_all(self, collection: str, *, newest_first: bool = False) -> list[tuple[str, dict[str, Any]]]:
        """Return ``(doc_id, body)`` pairs for every document in the collection."""
        order = Document.created_at.desc() if newest_first else Document.created_at.asc()
        stmt = select(Document).where(Document.collection == collection).order_by(order)
        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as err:
            raise self._fail(f"list {collection}", err) from err
        return [(row.doc_id, dict(row.data)) for row in rows]

    def find(self, collection: str, field: str, value: str) -> list[tuple[str, dict[str, Any]]]:
        """Return documents whose top-level string ``field`` equals ``value``."""
        stmt = select(Document).where(
            Document.collection == collection,
            Document.data[field].as_string() == value,
        )
        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as err:
            raise self._fail(f"find {collection}", err) from err
        return [(row.doc_id, dict(row.data)) for row in rows]
