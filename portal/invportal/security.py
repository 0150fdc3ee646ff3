# portal/invportal/security.py

"""
Security helpers for the inventory portal.

Responsibilities:
- Signing and reading the session cookie (a JWT naming the session row)
- FastAPI dependencies for the portal session, the per-request backend
  client and the signed-in user
- Permission checks for router dependencies

The portal never sees passwords beyond forwarding them; the backend issues
and validates the bearer token stored in the session row.
"""

from __future__ import annotations

import logging
import os
from datetime import timezone
from typing import Callable, Iterator, Optional

import httpx
from fastapi import Depends, Request
from fastapi.responses import Response
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .client import BackendClient, BackendError, BackendUnavailable, Endpoints
from .client.http import BACKEND_URL
from .database import get_db
from .apps.accounts import models as account_models
from .apps.accounts import services as account_services
from .apps.accounts.schemas import CurrentUser

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

# In production, ALWAYS override these via environment variables.
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "invportal_session")
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() in {
    "1",
    "true",
    "yes",
    "on",
}


# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------


class LoginRequired(Exception):
    """No usable session; the app redirects to /login."""


class PermissionDenied(Exception):
    """Signed in, but the page needs a permission the user lacks."""

    def __init__(self, message: str = "You do not have permission to view this page.") -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# SESSION COOKIE
# ---------------------------------------------------------------------------


def create_session_cookie(portal_session: account_models.PortalSession) -> str:
    """
    Sign the session id into a JWT.

    The expiry mirrors the row's `expires_at` so a stale cookie is rejected
    before the database is touched.
    """
    expires_at = portal_session.expires_at.replace(tzinfo=timezone.utc)
    to_encode = {"sub": portal_session.id, "exp": expires_at}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def read_session_cookie(value: Optional[str]) -> Optional[str]:
    """Return the session id from a cookie value, or None if invalid/expired."""
    if not value:
        return None
    try:
        payload = jwt.decode(value, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    session_id = payload.get("sub")
    return str(session_id) if session_id else None


def set_session_cookie(response: Response, portal_session: account_models.PortalSession) -> None:
    max_age = int(
        (portal_session.expires_at - account_models.utcnow()).total_seconds()
    )
    response.set_cookie(
        SESSION_COOKIE_NAME,
        create_session_cookie(portal_session),
        max_age=max(max_age, 0),
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def get_portal_session(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[account_models.PortalSession]:
    session_id = read_session_cookie(request.cookies.get(SESSION_COOKIE_NAME))
    return account_services.load_session(db, session_id)


def get_backend_transport() -> Optional[httpx.BaseTransport]:
    """Transport for backend calls; None means real HTTP. Overridden in tests."""
    return None


def get_backend(
    db: Session = Depends(get_db),
    portal_session: Optional[account_models.PortalSession] = Depends(get_portal_session),
    transport: Optional[httpx.BaseTransport] = Depends(get_backend_transport),
) -> Iterator[Endpoints]:
    """
    Backend endpoints for this request, authenticated as the session user.

    A 401 from any call drops the stored token so the next page goes
    straight to the login screen.
    """
    on_unauthorized: Optional[Callable[[], None]] = None
    if portal_session is not None:
        on_unauthorized = lambda: account_services.clear_auth_token(db, portal_session)  # noqa: E731

    client = BackendClient(
        BACKEND_URL,
        token=portal_session.auth_token if portal_session is not None else None,
        on_unauthorized=on_unauthorized,
        transport=transport,
    )
    try:
        yield Endpoints(client)
    finally:
        client.close()


def get_current_user(
    db: Session = Depends(get_db),
    portal_session: Optional[account_models.PortalSession] = Depends(get_portal_session),
    api: Endpoints = Depends(get_backend),
) -> CurrentUser:
    """
    Load the signed-in user from GET /api/user.

    Missing token or a rejected token both end at the login page. An
    unreachable backend is reported as such and keeps the token.
    """
    if portal_session is None or not portal_session.auth_token:
        raise LoginRequired()

    try:
        body = api.auth.current_user()
    except BackendUnavailable:
        raise
    except BackendError as exc:
        logger.warning(
            "Could not load current user; signing out",
            extra={"session_id": portal_session.id, "status_code": exc.status_code},
        )
        if portal_session.auth_token:
            account_services.clear_auth_token(db, portal_session)
        raise LoginRequired() from exc

    try:
        return CurrentUser.model_validate(body)
    except ValueError as exc:
        logger.warning(
            "Backend returned an unreadable user; signing out",
            extra={"session_id": portal_session.id},
        )
        account_services.clear_auth_token(db, portal_session)
        raise LoginRequired() from exc


def require_permission(permission: Optional[str]):
    """
    Dependency factory: the page is visible to administrators and to
    employees holding `permission`.

    Usage:
        @router.get("/units", dependencies=[Depends(require_permission("units"))])
    """

    def _dependency(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if not current_user.can_access(permission):
            raise PermissionDenied()
        return current_user

    return _dependency


def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not current_user.is_admin:
        raise PermissionDenied("Only system administrators can manage user accounts.")
    return current_user