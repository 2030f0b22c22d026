"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blog_stage.core.errors import Unauthenticated
from blog_stage.core.security import decode_access_token
from blog_stage.db.session import get_db
from blog_stage.repositories.document_repo import DocumentRepository
from blog_stage.services.accounts import AccountService
from blog_stage.services.admin import RoleAdministrationService
from blog_stage.services.audit import AuditLogWriter
from blog_stage.services.identity import LocalIdentityProvider
from blog_stage.services.lifecycle import ContentLifecycleService
from blog_stage.services.permissions import AuthSession
from blog_stage.services.tickets import SupportTicketService

# HTTP Bearer scheme for JWT authentication. Missing credentials are allowed
# through so that guest-accessible routes can share the same dependency.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_repository(db: SessionDep) -> DocumentRepository:
    return DocumentRepository(db)


RepositoryDep = Annotated[DocumentRepository, Depends(get_repository)]


def get_identity_provider(db: SessionDep) -> LocalIdentityProvider:
    return LocalIdentityProvider(db)


IdentityDep = Annotated[LocalIdentityProvider, Depends(get_identity_provider)]


def get_audit_writer(repo: RepositoryDep) -> AuditLogWriter:
    return AuditLogWriter(repo)


AuditDep = Annotated[AuditLogWriter, Depends(get_audit_writer)]


def get_account_service(repo: RepositoryDep, audit: AuditDep, identity: IdentityDep) -> AccountService:
    return AccountService(repo, audit, identity)


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


def get_lifecycle_service(
    repo: RepositoryDep,
    audit: AuditDep,
    identity: IdentityDep,
) -> ContentLifecycleService:
    return ContentLifecycleService(repo, audit, identity)


LifecycleServiceDep = Annotated[ContentLifecycleService, Depends(get_lifecycle_service)]


def get_admin_service(repo: RepositoryDep, audit: AuditDep) -> RoleAdministrationService:
    return RoleAdministrationService(repo, audit)


AdminServiceDep = Annotated[RoleAdministrationService, Depends(get_admin_service)]


def get_ticket_service(repo: RepositoryDep) -> SupportTicketService:
    return SupportTicketService(repo)


TicketServiceDep = Annotated[SupportTicketService, Depends(get_ticket_service)]


def get_optional_session(credentials: CredentialsDep, accounts: AccountServiceDep) -> AuthSession:
    """Resolve the caller, or a guest session when no token is sent.

    Raises:
        Unauthenticated: If a token is sent but is invalid or expired.
    """
    if credentials is None:
        return AuthSession.guest()
    account_id = decode_access_token(credentials.credentials)
    return accounts.resolve_session(account_id)


OptionalSessionDep = Annotated[AuthSession, Depends(get_optional_session)]


def get_current_session(session: OptionalSessionDep) -> AuthSession:
    """Require an authenticated caller.

    Raises:
        Unauthenticated: If no valid bearer token was sent.
    """
    if not session.authenticated:
        raise Unauthenticated("Not authenticated")
    return session


# Type alias for current session dependency
CurrentSessionDep = Annotated[AuthSession, Depends(get_current_session)]
