"""
Pydantic schemas for stored documents and API request/response models.

Stored documents use camelCase keys; attributes are snake_case.
"""

from .account import Account, DeletedAccount, Permissions
from .audit import ActivityAction, ActivityLogEntry, LoginLogEntry
from .post import DeletedPost, Post, PostCreate, PostOut, PostUpdate
from .ticket import SupportTicket, TicketResponse, TicketStatus

__all__ = [
    "Account", "DeletedAccount", "Permissions",
    "ActivityAction", "ActivityLogEntry", "LoginLogEntry",
    "DeletedPost", "Post", "PostCreate", "PostOut", "PostUpdate",
    "SupportTicket", "TicketResponse", "TicketStatus",
]
