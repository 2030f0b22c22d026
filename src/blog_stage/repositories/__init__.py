"""Persistence adapters."""

from .document_repo import DocumentRepository

__all__ = ["DocumentRepository"]
