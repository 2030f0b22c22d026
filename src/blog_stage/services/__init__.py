# src/blog_stage/services/__init__.py
"""Business logic services for the Blog Stage application."""

from .accounts import AccountService
from .admin import RoleAdministrationService
from .audit import AuditLogWriter
from .identity import IdentityProvider, LocalIdentityProvider
from .lifecycle import ContentLifecycleService
from .tickets import SupportTicketService

__all__ = [
    "AccountService",
    "AuditLogWriter",
    "ContentLifecycleService",
    "IdentityProvider",
    "LocalIdentityProvider",
    "RoleAdministrationService",
    "SupportTicketService",
]
