# src/blog_stage/models/__init__.py
"""SQLAlchemy models for the Blog Stage application."""

from .document import Document
from .identity import Identity

__all__ = ["Document", "Identity"]
