# portal/invportal/apps/accounts/services.py

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from invportal.client import AuthApi, BackendError, BackendUnavailable, Unauthorized, ValidationFailed
from invportal.forms import Errors

from . import models
from .models import utcnow

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

try:
    SESSION_TTL_MINUTES: int = int(os.getenv("SESSION_TTL_MINUTES", "720"))
except ValueError:
    SESSION_TTL_MINUTES = 720

try:
    OTP_RESEND_COOLDOWN_SEC: int = int(os.getenv("OTP_RESEND_COOLDOWN_SEC", "60"))
except ValueError:
    OTP_RESEND_COOLDOWN_SEC = 60

OTP_CODE_LENGTH = 6

INVALID_CREDENTIALS = "These credentials do not match our records."
VERIFICATION_FAILED = "Verification failed. Please try again."
INCOMPLETE_CODE = "Please enter all 6 digits."
CODE_SENT = "Code sent."
RESEND_FAILED = "Failed to resend code."

FLASH_LEVELS = {"success", "error"}


# ---------------------------------------------------------------------------
# SESSION STORE
# ---------------------------------------------------------------------------


def open_session(db: Session, *, now: Optional[datetime] = None) -> models.PortalSession:
    now = now or utcnow()
    portal_session = models.PortalSession(
        created_at=now,
        last_seen_at=now,
        expires_at=now + timedelta(minutes=SESSION_TTL_MINUTES),
    )
    db.add(portal_session)
    db.commit()
    db.refresh(portal_session)
    return portal_session


def load_session(
    db: Session,
    session_id: Optional[str],
    *,
    now: Optional[datetime] = None,
) -> Optional[models.PortalSession]:
    """Return the live session row, or None if unknown or expired."""
    if not session_id:
        return None
    now = now or utcnow()
    portal_session = db.get(models.PortalSession, str(session_id))
    if portal_session is None:
        return None
    if portal_session.expires_at <= now:
        db.delete(portal_session)
        db.commit()
        return None
    portal_session.last_seen_at = now
    db.commit()
    return portal_session


def end_session(db: Session, portal_session: models.PortalSession) -> None:
    db.delete(portal_session)
    db.commit()


def store_auth_token(
    db: Session,
    portal_session: models.PortalSession,
    token: str,
    *,
    now: Optional[datetime] = None,
) -> models.PortalSession:
    """
    Sign the browser in under a fresh session id.

    The pre-login row is replaced, never upgraded, so a cookie obtained
    before login can't ride along into the signed-in session. Queued
    flashes move to the new row. The caller must reissue the cookie.
    """
    now = now or utcnow()
    signed_in = models.PortalSession(
        auth_token=token,
        flash_json=list(portal_session.flash_json) if portal_session.flash_json else None,
        created_at=now,
        last_seen_at=now,
        expires_at=now + timedelta(minutes=SESSION_TTL_MINUTES),
    )
    db.add(signed_in)
    db.delete(portal_session)
    db.commit()
    db.refresh(signed_in)
    logger.info("Portal session signed in", extra={"session_id": signed_in.id})
    return signed_in


def clear_auth_token(db: Session, portal_session: models.PortalSession) -> None:
    portal_session.auth_token = None
    db.commit()


def set_pending_user(
    db: Session,
    portal_session: models.PortalSession,
    user_id: int,
    *,
    now: Optional[datetime] = None,
) -> None:
    """Remember who is verifying; the code was just sent, so start the cooldown."""
    now = now or utcnow()
    portal_session.auth_token = None
    portal_session.pending_user_id = int(user_id)
    portal_session.resend_available_at = now + timedelta(seconds=OTP_RESEND_COOLDOWN_SEC)
    db.commit()


def clear_pending_user(db: Session, portal_session: models.PortalSession) -> None:
    portal_session.pending_user_id = None
    portal_session.resend_available_at = None
    db.commit()


def add_flash(
    db: Session,
    portal_session: models.PortalSession,
    level: str,
    message: str,
) -> None:
    if level not in FLASH_LEVELS:
        raise ValueError(f"Unknown flash level: {level}")
    # Reassign so SQLAlchemy sees the JSON column change.
    queued = list(portal_session.flash_json or [])
    queued.append({"level": level, "message": message})
    portal_session.flash_json = queued
    db.commit()


def pop_flashes(db: Session, portal_session: Optional[models.PortalSession]) -> List[Dict[str, str]]:
    if portal_session is None or not portal_session.flash_json:
        return []
    queued = list(portal_session.flash_json)
    portal_session.flash_json = None
    db.commit()
    return queued


def resend_seconds_remaining(
    portal_session: models.PortalSession,
    *,
    now: Optional[datetime] = None,
) -> int:
    if portal_session.resend_available_at is None:
        return 0
    now = now or utcnow()
    remaining = (portal_session.resend_available_at - now).total_seconds()
    if remaining <= 0:
        return 0
    # Round up so the page never shows "0 seconds" while still blocked.
    return math.ceil(remaining)


def purge_expired_sessions(db: Session, *, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    deleted = (
        db.query(models.PortalSession)
        .filter(models.PortalSession.expires_at <= now)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info("Purged expired portal sessions", extra={"count": deleted})
    return deleted


# ---------------------------------------------------------------------------
# AUTH FLOWS
# ---------------------------------------------------------------------------


@dataclass
class AuthOutcome:
    """Result of a login/verification attempt, for the router to render."""

    redirect_to: Optional[str] = None
    errors: Errors = field(default_factory=dict)
    status: Optional[str] = None
    # Set when the browser was signed in and needs a new session cookie.
    session: Optional[models.PortalSession] = None

    @property
    def ok(self) -> bool:
        return self.redirect_to is not None


def extract_token(body: Any) -> Optional[str]:
    """The backend has shipped the token under several keys over time."""
    if not isinstance(body, dict):
        return None
    data = body.get("data") if isinstance(body.get("data"), dict) else {}
    for candidate in (
        body.get("access_token"),
        data.get("access_token"),
        data.get("token"),
        body.get("token"),
    ):
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def _pending_user_id(body: Dict[str, Any]) -> Optional[int]:
    raw = body.get("user_id")
    if raw is None and isinstance(body.get("data"), dict):
        raw = body["data"].get("user_id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def login(
    db: Session,
    portal_session: models.PortalSession,
    auth: AuthApi,
    *,
    email: str,
    password: str,
    now: Optional[datetime] = None,
) -> AuthOutcome:
    """
    Post credentials to the backend.

    Either a verification code is required (pending user stored, go to the
    code page) or a token comes straight back (stored, go home). Failures
    other than an unreachable backend become a status message.
    """
    try:
        body = auth.login(email, password) or {}
    except ValidationFailed as exc:
        if exc.errors:
            return AuthOutcome(errors=exc.errors)
        return AuthOutcome(status=exc.backend_message or INVALID_CREDENTIALS)
    except Unauthorized:
        return AuthOutcome(status=INVALID_CREDENTIALS)
    except BackendUnavailable:
        raise
    except BackendError as exc:
        logger.info("Login rejected by backend", extra={"status_code": exc.status_code})
        return AuthOutcome(status=exc.backend_message or INVALID_CREDENTIALS)

    if isinstance(body, dict) and body.get("requires_verification"):
        user_id = _pending_user_id(body)
        if user_id is None:
            raise BackendError("Login response is missing the user to verify.", payload=body)
        set_pending_user(db, portal_session, user_id, now=now)
        return AuthOutcome(redirect_to="/verify-code")

    token = extract_token(body)
    if token is None:
        raise BackendError("Login response did not include an access token.", payload=body)
    return AuthOutcome(redirect_to="/", session=store_auth_token(db, portal_session, token, now=now))


def normalise_code(raw: Optional[str]) -> str:
    """Keep digits only, cut to the code length (handles pasted codes)."""
    return re.sub(r"\D", "", raw or "")[:OTP_CODE_LENGTH]


def verify_code(
    db: Session,
    portal_session: models.PortalSession,
    auth: AuthApi,
    raw_code: Optional[str],
) -> AuthOutcome:
    if portal_session.pending_user_id is None:
        return AuthOutcome(redirect_to="/login")

    code = normalise_code(raw_code)
    if len(code) < OTP_CODE_LENGTH:
        return AuthOutcome(errors={"code": [INCOMPLETE_CODE]})

    try:
        body = auth.verify_code(portal_session.pending_user_id, code) or {}
    except ValidationFailed as exc:
        return AuthOutcome(errors=exc.errors)
    except BackendError as exc:
        logger.info(
            "OTP verification failed",
            extra={"user_id": portal_session.pending_user_id, "status_code": exc.status_code},
        )
        return AuthOutcome(status=VERIFICATION_FAILED)

    token = body.get("access_token") if isinstance(body, dict) else None
    if not token:
        return AuthOutcome(status=VERIFICATION_FAILED)
    return AuthOutcome(redirect_to="/", session=store_auth_token(db, portal_session, token))


def resend_code(
    db: Session,
    portal_session: models.PortalSession,
    auth: AuthApi,
    *,
    now: Optional[datetime] = None,
) -> Tuple[bool, str]:
    """Ask the backend to email a fresh code; returns (sent, message)."""
    now = now or utcnow()
    if portal_session.pending_user_id is None:
        return False, RESEND_FAILED

    remaining = resend_seconds_remaining(portal_session, now=now)
    if remaining > 0:
        return False, f"Please wait {remaining} seconds before requesting a new code."

    try:
        body = auth.resend_verification(portal_session.pending_user_id)
    except BackendError as exc:
        return False, exc.backend_message or RESEND_FAILED

    portal_session.resend_available_at = now + timedelta(seconds=OTP_RESEND_COOLDOWN_SEC)
    db.commit()
    message = body.get("message") if isinstance(body, dict) else None
    return True, message or CODE_SENT


def logout(db: Session, portal_session: models.PortalSession, auth: AuthApi) -> None:
    """Best-effort backend logout, then the local session is always dropped."""
    if portal_session.auth_token:
        try:
            auth.logout()
        except BackendError as exc:
            logger.info(
                "Backend logout failed; clearing local session anyway",
                extra={"session_id": portal_session.id, "status_code": exc.status_code},
            )
    end_session(db, portal_session)
