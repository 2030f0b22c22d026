# src/blog_stage/services/audit.py
"""Append-only activity and login logging."""

from __future__ import annotations

import logging
from typing import Any

from blog_stage.db.time import utcnow
from blog_stage.repositories.document_repo import ACTIVITY_LOG, LOGIN_LOG, DocumentRepository
from blog_stage.schemas.audit import ActivityAction, ActivityLogEntry, LoginLogEntry
from blog_stage.services.permissions import AuthSession, can_view_audit_logs, can_view_login_logs

logger = logging.getLogger(__name__)


class AuditLogWriter:
    """Best-effort sink for activity and login records.

    ``record`` and ``record_login`` never raise: the operation being audited has
    already happened, so a failed write is reported to the operational log and
    the entry is lost. Delivery is at most once.
    """

    def __init__(self, repo: DocumentRepository) -> None:
        self.repo = repo

    def record(
        self,
        actor: AuthSession,
        action: ActivityAction,
        details: dict[str, Any] | None = None,
    ) -> str | None:
        """Append an activity entry; returns its id, or None if the write failed."""
        entry = {
            "userId": actor.account_id,
            "userEmail": actor.email,
            "timestamp": utcnow().isoformat(),
            "action": action.value,
            "details": details or {},
        }
        try:
            return self.repo.add(ACTIVITY_LOG, entry)
        except Exception:
            logger.exception("Failed to append %s activity entry for %s", action.value, actor.email)
            return None

    def record_login(self, account_id: str, email: str, device: dict[str, Any] | None = None) -> str | None:
        """Append a login entry; returns its id, or None if the write failed."""
        entry = {
            "userId": account_id,
            "email": email,
            "timestamp": utcnow().isoformat(),
            "action": "login",
            "deviceInfo": device or {},
        }
        try:
            return self.repo.add(LOGIN_LOG, entry)
        except Exception:
            logger.exception("Failed to append login entry for %s", email)
            return None

    def list_activity(
        self,
        actor: AuthSession,
        action: ActivityAction | None = None,
    ) -> list[ActivityLogEntry]:
        """Return activity entries newest first, optionally filtered by action."""
        can_view_audit_logs(actor).require()
        if action is not None:
            rows = self.repo.find(ACTIVITY_LOG, "action", action.value)
        else:
            rows = self.repo.list_all(ACTIVITY_LOG)
        entries = [ActivityLogEntry.from_document(doc_id, data) for doc_id, data in rows]
        return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)

    def list_logins(self, actor: AuthSession) -> list[LoginLogEntry]:
        """Return login entries newest first."""
        can_view_login_logs(actor).require()
        entries = [
            LoginLogEntry.from_document(doc_id, data)
            for doc_id, data in self.repo.list_all(LOGIN_LOG)
        ]
        return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)
