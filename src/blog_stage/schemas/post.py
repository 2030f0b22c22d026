# src/blog_stage/schemas/post.py
"""Post-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from blog_stage.schemas.common import CamelModel, DocumentModel


class Post(DocumentModel):
    """A live blog post.

    ``author`` is the public label (possibly "Anonymous"); ``actual_author``
    and ``author_email`` always hold the owning account's email.
    """

    title: str
    content: str
    author: str
    author_email: str
    actual_author: str
    is_anonymous: bool = False
    created_at: datetime | None = None


class DeletedPost(Post):
    """A post archived in the deleted-posts collection."""

    original_id: str
    deleted_by: str
    deleted_by_email: str
    deleted_at: datetime


class PostOut(CamelModel):
    """Post as shown to a particular viewer.

    Owner fields are withheld on anonymous posts unless the viewer may see them.
    """

    id: str
    title: str
    content: str
    author: str
    is_anonymous: bool
    created_at: datetime | None = None
    author_email: str | None = None
    actual_author: str | None = None


class PostCreate(CamelModel):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    is_anonymous: bool = False


class PostUpdate(CamelModel):
    """Partial update of a post's title and/or content."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)

    @model_validator(mode="after")
    def _require_change(self) -> PostUpdate:
        if self.title is None and self.content is None:
            raise ValueError("Provide a title or content to update")
        return self
