# src/blog_stage/services/tickets.py
"""Support ticket workflow: open -> responded -> closed -> open."""

from __future__ import annotations

import logging

from blog_stage.core.errors import DenialReason, NotFound, PermissionDenied, TicketClosed
from blog_stage.db.time import utcnow
from blog_stage.repositories.document_repo import SUPPORT_TICKETS, DocumentRepository
from blog_stage.schemas.ticket import (
    GUEST,
    ResponseSource,
    SupportTicket,
    TicketCreate,
    TicketStatus,
)
from blog_stage.services.permissions import AuthSession, can_manage_support_ticket

logger = logging.getLogger(__name__)


class SupportTicketService:
    """Tickets can be submitted by anyone; only staff advance their status."""

    def __init__(self, repo: DocumentRepository) -> None:
        self.repo = repo

    def get_ticket(self, ticket_id: str) -> SupportTicket:
        data = self.repo.get(SUPPORT_TICKETS, ticket_id)
        if data is None:
            raise NotFound("ticket", ticket_id)
        return SupportTicket.from_document(ticket_id, data)

    def view_ticket(self, actor: AuthSession, ticket_id: str) -> SupportTicket:
        """Return a ticket to staff or to the account that submitted it."""
        ticket = self.get_ticket(ticket_id)
        if not (can_manage_support_ticket(actor) or self._is_submitter(actor, ticket)):
            raise PermissionDenied(DenialReason.NOT_OWNER_OR_ADMIN)
        return ticket

    def submit_ticket(self, submitter: AuthSession, data: TicketCreate) -> SupportTicket:
        """Open a ticket, recording the submitter's suspension state at this moment."""
        now = utcnow().isoformat()
        body = {
            "subject": data.subject.strip(),
            "message": data.message.strip(),
            "status": TicketStatus.OPEN.value,
            "userId": submitter.account_id or GUEST,
            "userEmail": submitter.email or GUEST,
            "isSuspended": submitter.suspended,
            "responses": [],
            "createdAt": now,
            "updatedAt": now,
        }
        ticket_id = self.repo.add(SUPPORT_TICKETS, body)
        logger.info("Support ticket %s opened by %s", ticket_id, body["userEmail"])
        return SupportTicket.from_document(ticket_id, body)

    def _is_submitter(self, actor: AuthSession, ticket: SupportTicket) -> bool:
        return actor.authenticated and ticket.user_id == actor.account_id

    def reply(self, actor: AuthSession, ticket_id: str, text: str) -> SupportTicket:
        """Append a response.

        Staff replies mark the ticket responded; submitter replies leave the
        status alone. Closed tickets take no replies until reopened.
        """
        ticket = self.get_ticket(ticket_id)
        if ticket.status is TicketStatus.CLOSED:
            raise TicketClosed(ticket_id)
        staff = bool(can_manage_support_ticket(actor))
        if not staff and not self._is_submitter(actor, ticket):
            raise PermissionDenied(DenialReason.NOT_OWNER_OR_ADMIN)

        now = utcnow().isoformat()
        response: dict[str, object] = {
            "text": text.strip(),
            "from": (ResponseSource.ADMIN if staff else ResponseSource.USER).value,
            "timestamp": now,
        }
        fields: dict[str, object] = {"updatedAt": now}
        if staff:
            response["adminId"] = actor.account_id
            response["adminEmail"] = actor.email
            fields["status"] = TicketStatus.RESPONDED.value

        responses = [item.model_dump(by_alias=True, mode="json", exclude_none=True) for item in ticket.responses]
        fields["responses"] = [*responses, response]
        body = self.repo.update(SUPPORT_TICKETS, ticket_id, fields)
        if body is None:
            raise NotFound("ticket", ticket_id)
        return SupportTicket.from_document(ticket_id, body)

    def _set_status(self, actor: AuthSession, ticket_id: str, status: TicketStatus) -> SupportTicket:
        can_manage_support_ticket(actor).require()
        self.get_ticket(ticket_id)
        body = self.repo.update(
            SUPPORT_TICKETS,
            ticket_id,
            {"status": status.value, "updatedAt": utcnow().isoformat()},
        )
        if body is None:
            raise NotFound("ticket", ticket_id)
        logger.info("Support ticket %s set to %s by %s", ticket_id, status.value, actor.email)
        return SupportTicket.from_document(ticket_id, body)

    def close(self, actor: AuthSession, ticket_id: str) -> SupportTicket:
        return self._set_status(actor, ticket_id, TicketStatus.CLOSED)

    def reopen(self, actor: AuthSession, ticket_id: str) -> SupportTicket:
        return self._set_status(actor, ticket_id, TicketStatus.OPEN)

    def list_tickets(
        self,
        actor: AuthSession,
        status: TicketStatus | None = None,
        suspended_only: bool = False,
    ) -> list[SupportTicket]:
        """Staff view of all tickets, newest first."""
        can_manage_support_ticket(actor).require()
        tickets = [
            SupportTicket.from_document(doc_id, data)
            for doc_id, data in self.repo.list_all(SUPPORT_TICKETS, newest_first=True)
        ]
        if status is not None:
            tickets = [ticket for ticket in tickets if ticket.status is status]
        if suspended_only:
            tickets = [ticket for ticket in tickets if ticket.is_suspended]
        return tickets

    def list_my_tickets(self, actor: AuthSession) -> list[SupportTicket]:
        if not actor.authenticated or actor.account_id is None:
            raise PermissionDenied(DenialReason.UNAUTHENTICATED)
        tickets = [
            SupportTicket.from_document(doc_id, data)
            for doc_id, data in self.repo.find(SUPPORT_TICKETS, "userId", actor.account_id)
        ]
        return sorted(tickets, key=lambda ticket: ticket.created_at, reverse=True)
