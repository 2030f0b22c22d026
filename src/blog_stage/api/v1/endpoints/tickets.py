# src/blog_stage/api/v1/endpoints/tickets.py
"""Support ticket endpoints."""

from fastapi import APIRouter, Query, status

from blog_stage.api.v1.dependencies import CurrentSessionDep, OptionalSessionDep, TicketServiceDep
from blog_stage.schemas.ticket import SupportTicket, TicketCreate, TicketReply, TicketStatus

router = APIRouter(prefix="/support-tickets", tags=["support"])


@router.post("/", response_model=SupportTicket, status_code=status.HTTP_201_CREATED)
async def submit_ticket(
    payload: TicketCreate,
    session: OptionalSessionDep,
    tickets: TicketServiceDep,
) -> SupportTicket:
    """Open a ticket. Guests may submit without a token."""
    return tickets.submit_ticket(session, payload)


@router.get("/", response_model=list[SupportTicket])
async def list_tickets(
    session: CurrentSessionDep,
    tickets: TicketServiceDep,
    status_filter: TicketStatus | None = Query(None, alias="status"),
    suspended_only: bool = Query(False, alias="suspendedOnly"),
) -> list[SupportTicket]:
    return tickets.list_tickets(session, status=status_filter, suspended_only=suspended_only)


@router.get("/mine", response_model=list[SupportTicket])
async def list_my_tickets(session: CurrentSessionDep, tickets: TicketServiceDep) -> list[SupportTicket]:
    return tickets.list_my_tickets(session)


@router.get("/{ticket_id}", response_model=SupportTicket)
async def get_ticket(ticket_id: str, session: CurrentSessionDep, tickets: TicketServiceDep) -> SupportTicket:
    return tickets.view_ticket(session, ticket_id)


@router.post("/{ticket_id}/responses", response_model=SupportTicket)
async def reply_to_ticket(
    ticket_id: str,
    payload: TicketReply,
    session: CurrentSessionDep,
    tickets: TicketServiceDep,
) -> SupportTicket:
    """Append a reply. Closed tickets must be reopened first."""
    return tickets.reply(session, ticket_id, payload.text)


@router.post("/{ticket_id}/close", response_model=SupportTicket)
async def close_ticket(ticket_id: str, session: CurrentSessionDep, tickets: TicketServiceDep) -> SupportTicket:
    return tickets.close(session, ticket_id)


@router.post("/{ticket_id}/reopen", response_model=SupportTicket)
async def reopen_ticket(ticket_id: str, session: CurrentSessionDep, tickets: TicketServiceDep) -> SupportTicket:
    return tickets.reopen(session, ticket_id)
