# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PASSWORD_SALT_ROUNDS", "4")

from blog_stage.core.security import create_access_token
from blog_stage.core.settings import Settings
from blog_stage.db.session import Base
from blog_stage.db.session import get_db as app_get_session
from blog_stage.main import app as fastapi_app
from blog_stage.repositories.document_repo import ACCOUNTS, DocumentRepository
from blog_stage.schemas.account import Account, Permissions
from blog_stage.services.accounts import AccountService, new_account_document
from blog_stage.services.admin import RoleAdministrationService
from blog_stage.services.audit import AuditLogWriter
from blog_stage.services.identity import LocalIdentityProvider
from blog_stage.services.lifecycle import ContentLifecycleService
from blog_stage.services.permissions import AuthSession
from blog_stage.services.tickets import SupportTicketService

TEST_DB_URL = "sqlite://"
DEFAULT_PASSWORD = "correct-horse"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

        # Every repository write commits, so wipe the tables between tests.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def test_settings() -> Settings:
    """Settings with the master password configured, for override-path tests."""
    return Settings(SUPER_ADMIN_MASTER_PASSWORD="open-sesame")


@pytest.fixture()
def repo(db_session: Session) -> DocumentRepository:
    return DocumentRepository(db_session)


@pytest.fixture()
def identity(db_session: Session) -> LocalIdentityProvider:
    return LocalIdentityProvider(db_session)


@pytest.fixture()
def audit(repo: DocumentRepository) -> AuditLogWriter:
    return AuditLogWriter(repo)


@pytest.fixture()
def lifecycle(
    repo: DocumentRepository,
    audit: AuditLogWriter,
    identity: LocalIdentityProvider,
) -> ContentLifecycleService:
    return ContentLifecycleService(repo, audit, identity)


@pytest.fixture()
def admin_service(repo: DocumentRepository, audit: AuditLogWriter) -> RoleAdministrationService:
    return RoleAdministrationService(repo, audit)


@pytest.fixture()
def account_service(
    repo: DocumentRepository,
    audit: AuditLogWriter,
    identity: LocalIdentityProvider,
) -> AccountService:
    return AccountService(repo, audit, identity)


@pytest.fixture()
def ticket_service(repo: DocumentRepository) -> SupportTicketService:
    return SupportTicketService(repo)


@pytest.fixture()
def make_account(
    repo: DocumentRepository,
    identity: LocalIdentityProvider,
) -> Callable[..., Account]:
    """Return a factory that persists an identity and its account document."""

    def _make(
        email: str,
        *,
        name: str = "",
        is_admin: bool = False,
        is_super_admin: bool = False,
        permissions: Permissions | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> Account:
        token = identity.register(email, password)
        identity.mark_verified(token.uid)
        body: dict[str, Any] = new_account_document(token, name=name)
        body["isAdmin"] = is_admin or is_super_admin
        body["isSuperAdmin"] = is_super_admin
        body["emailVerified"] = True
        if permissions is not None:
            body["permissions"] = permissions.model_dump(by_alias=True)
        repo.set(ACCOUNTS, token.uid, body)
        return Account.from_document(token.uid, body)

    return _make


@pytest.fixture()
def user(make_account: Callable[..., Account]) -> Account:
    return make_account("reader@example.com", name="Regular Reader")


@pytest.fixture()
def other_user(make_account: Callable[..., Account]) -> Account:
    return make_account("writer@example.com", name="Other Writer")


@pytest.fixture()
def admin(make_account: Callable[..., Account]) -> Account:
    return make_account("admin@example.com", name="Site Admin", is_admin=True)


@pytest.fixture()
def super_admin(make_account: Callable[..., Account]) -> Account:
    return make_account("root@example.com", name="Root", is_super_admin=True)


def session_for(account: Account) -> AuthSession:
    return AuthSession.from_account(account)


def auth_headers(account: Account) -> dict[str, str]:
    """Return authorization headers for ``account``."""
    return {"Authorization": f"Bearer {create_access_token(account.id)}"}
