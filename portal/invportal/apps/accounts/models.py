# portal/invportal/apps/accounts/models.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text

from invportal.database import Base
from invportal.session_id import generate_session_id


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column here stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PortalSession(Base):
    """
    Server-side state of one browser session.

    - `auth_token` is the backend bearer token once the user is signed in.
    - `pending_user_id` is the backend user waiting for the emailed code.
    - `resend_available_at` gates the "resend code" action.
    - `flash_json` queues one-shot success/error messages for the next page.

    The browser only ever holds a signed cookie naming the row.
    """

    __tablename__ = "portal_sessions"
    __table_args__ = (
        Index("idx_portal_sessions_expires", "expires_at"),
    )

    id = Column(
        String(36),
        primary_key=True,
        default=generate_session_id,
    )

    auth_token = Column(Text, nullable=True)
    pending_user_id = Column(Integer, nullable=True)
    resend_available_at = Column(DateTime, nullable=True)
    flash_json = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_seen_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.auth_token)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<PortalSession id={self.id} authenticated={self.is_authenticated}>"
