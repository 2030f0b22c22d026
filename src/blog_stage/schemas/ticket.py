"""Support ticket schemas."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from blog_stage.schemas.common import CamelModel, DocumentModel

GUEST = "guest"


class TicketStatus(StrEnum):
    OPEN = "open"
    RESPONDED = "responded"
    CLOSED = "closed"


class ResponseSource(StrEnum):
    USER = "user"
    ADMIN = "admin"


class TicketResponse(CamelModel):
    text: str
    source: ResponseSource = Field(..., alias="from")
    admin_id: str | None = None
    admin_email: str | None = None
    timestamp: datetime


class SupportTicket(DocumentModel):
    """A support request; ``user_email`` is "guest" for anonymous submitters."""

    subject: str
    message: str
    status: TicketStatus = TicketStatus.OPEN
    user_id: str = GUEST
    user_email: str = GUEST
    is_suspended: bool = False
    responses: list[TicketResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TicketCreate(CamelModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)


class TicketReply(CamelModel):
    text: str = Field(..., min_length=1)
