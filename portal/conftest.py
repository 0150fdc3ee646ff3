from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["PORTAL_DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["INVENTORY_BACKEND_URL"] = "http://backend.test"

from fastapi.testclient import TestClient  # noqa: E402

from invportal.database import Base, get_db  # noqa: E402
from invportal.apps.accounts import models as account_models  # noqa: E402
from invportal.apps.accounts import services as account_services  # noqa: E402
from invportal.main import app  # noqa: E402
from invportal.security import (  # noqa: E402
    SESSION_COOKIE_NAME,
    create_session_cookie,
    get_backend_transport,
)
from invportal.tests.support import ADMIN_USER, FakeBackend  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(
        bind=engine,
        tables=[account_models.PortalSession.__table__],
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def client(session_factory, backend):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_backend_transport] = lambda: backend.transport
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def login_as(client, db_session, backend):
    """Open a signed-in portal session for `user` and attach its cookie."""

    def _login(user: Dict[str, Any] = ADMIN_USER, token: str = "test-token"):
        portal_session = account_services.store_auth_token(
            db_session, account_services.open_session(db_session), token
        )
        backend.on("GET", "/api/user", json=user)
        client.cookies.set(SESSION_COOKIE_NAME, create_session_cookie(portal_session))
        return portal_session

    return _login


@pytest.fixture()
def stored_token(db_session):
    """Read a session's token straight from the table, bypassing the identity map."""

    def _read(session_id: str):
        return (
            db_session.query(account_models.PortalSession.auth_token)
            .filter(account_models.PortalSession.id == session_id)
            .scalar()
        )

    return _read
