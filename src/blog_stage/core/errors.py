"""Domain error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. Handlers in ``blog_stage.api.errors`` translate them into
JSON responses.
"""

from __future__ import annotations

from enum import StrEnum

from fastapi import status


class DenialReason(StrEnum):
    """Why the permission model refused an action."""

    UNAUTHENTICATED = "unauthenticated"
    SUSPENDED = "suspended"
    NOT_OWNER_OR_ADMIN = "not_owner_or_admin"
    MISSING_CAPABILITY = "missing_capability"
    NOT_ADMIN = "not_admin"
    NOT_SUPER_ADMIN = "not_super_admin"
    CANNOT_MODIFY_OTHER_SUPER_ADMIN = "cannot_modify_other_super_admin"
    ACCOUNT_DELETED = "account_deleted"
    EMAIL_NOT_VERIFIED = "email_not_verified"


_DENIAL_MESSAGES: dict[DenialReason, str] = {
    DenialReason.UNAUTHENTICATED: "You must be logged in to do that",
    DenialReason.SUSPENDED: "Your account is suspended",
    DenialReason.NOT_OWNER_OR_ADMIN: "You can only change your own content",
    DenialReason.MISSING_CAPABILITY: "You don't have permission to do that",
    DenialReason.NOT_ADMIN: "Only admins can do that",
    DenialReason.NOT_SUPER_ADMIN: "Only super admins can do that",
    DenialReason.CANNOT_MODIFY_OTHER_SUPER_ADMIN: "Cannot modify another super admin's status",
    DenialReason.ACCOUNT_DELETED: "This account has been deleted",
    DenialReason.EMAIL_NOT_VERIFIED: "Please verify your email before logging in",
}


class BlogError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PermissionDenied(BlogError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"

    def __init__(self, reason: DenialReason, message: str | None = None) -> None:
        super().__init__(message or _DENIAL_MESSAGES[reason])
        self.reason = reason


class NotFound(BlogError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity.capitalize()} not found")
        self.entity = entity
        self.entity_id = entity_id


class EmailConflict(BlogError):
    status_code = status.HTTP_409_CONFLICT
    code = "email_conflict"

    def __init__(self, email: str) -> None:
        super().__init__(f"An account with email {email} already exists")
        self.email = email


class IdCollision(BlogError):
    """A restore would overwrite unrelated live content."""

    status_code = status.HTTP_409_CONFLICT
    code = "id_collision"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"A live {entity} already uses id {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class TicketClosed(BlogError):
    status_code = status.HTTP_409_CONFLICT
    code = "ticket_closed"

    def __init__(self, ticket_id: str) -> None:
        super().__init__("This ticket is closed. It must be reopened before replying")
        self.ticket_id = ticket_id


class InvalidInput(BlogError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "invalid_input"


class Unauthenticated(BlogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class ReauthenticationFailed(BlogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "reauthentication_failed"

    def __init__(self) -> None:
        super().__init__("Password is incorrect")


class UpstreamUnavailable(BlogError):
    """The document store or identity provider failed.

    The message is always generic; the underlying cause is chained and logged.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "upstream_unavailable"

    def __init__(self, operation: str) -> None:
        super().__init__("Service temporarily unavailable, please try again later")
        self.operation = operation
