"""Shared Pydantic bases for stored documents and API payloads."""
from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while exposing snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentModel(CamelModel):
    """A record stored in a document collection.

    ``id`` is the document key and is not part of the stored body. Unknown
    fields are kept so that moving a record between collections never drops
    data.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., description="Document id")

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Self:
        """Build a model from a stored ``(doc_id, body)`` pair."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-safe body to persist (without ``id``)."""
        return self.model_dump(by_alias=True, mode="json", exclude={"id"})
