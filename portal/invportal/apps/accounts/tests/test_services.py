from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from invportal.apps.accounts import models, services
from invportal.client import BackendClient, BackendUnavailable, Endpoints
from invportal.tests.support import FakeBackend


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def auth(backend):
    client = BackendClient("http://backend.test", transport=backend.transport)
    try:
        yield Endpoints(client).auth
    finally:
        client.close()


@pytest.fixture()
def portal_session(db_session):
    return services.open_session(db_session)


def test_load_session_drops_expired_rows(db_session):
    now = models.utcnow()
    portal_session = services.open_session(db_session, now=now)

    assert services.load_session(db_session, portal_session.id, now=now) is portal_session
    later = now + timedelta(minutes=services.SESSION_TTL_MINUTES + 1)
    assert services.load_session(db_session, portal_session.id, now=later) is None
    assert db_session.query(models.PortalSession).count() == 0


def test_unknown_session_ids_load_as_none(db_session):
    assert services.load_session(db_session, None) is None
    assert services.load_session(db_session, "PS-missing") is None


def test_flashes_are_shown_once(db_session, portal_session):
    services.add_flash(db_session, portal_session, "success", "Saved.")
    services.add_flash(db_session, portal_session, "error", "Nope.")

    assert services.pop_flashes(db_session, portal_session) == [
        {"level": "success", "message": "Saved."},
        {"level": "error", "message": "Nope."},
    ]
    assert services.pop_flashes(db_session, portal_session) == []

    with pytest.raises(ValueError):
        services.add_flash(db_session, portal_session, "info", "x")


def test_extract_token_checks_every_known_location():
    assert services.extract_token({"access_token": "a"}) == "a"
    assert services.extract_token({"data": {"access_token": "b"}}) == "b"
    assert services.extract_token({"data": {"token": "c"}}) == "c"
    assert services.extract_token({"token": "d"}) == "d"
    assert services.extract_token({"data": []}) is None
    assert services.extract_token(None) is None


def test_login_with_verification_starts_the_resend_cooldown(db_session, portal_session, auth, backend):
    backend.on("POST", "/api/login", json={"requires_verification": True, "user_id": 7})
    now = models.utcnow()

    outcome = services.login(db_session, portal_session, auth, email="a@b.ph", password="pw", now=now)

    assert outcome.redirect_to == "/verify-code"
    assert portal_session.pending_user_id == 7
    assert portal_session.auth_token is None
    assert services.resend_seconds_remaining(portal_session, now=now) == services.OTP_RESEND_COOLDOWN_SEC
    assert services.resend_seconds_remaining(portal_session, now=now + timedelta(seconds=59.5)) == 1
    assert services.resend_seconds_remaining(portal_session, now=now + timedelta(seconds=61)) == 0


def test_login_without_verification_stores_the_token(db_session, portal_session, auth, backend):
    backend.on("POST", "/api/login", json={"data": {"token": "tok-1"}})

    outcome = services.login(db_session, portal_session, auth, email="a@b.ph", password="pw")

    assert outcome.redirect_to == "/"
    assert outcome.session.auth_token == "tok-1"
    assert outcome.session.id != portal_session.id


def test_login_failures_become_messages(db_session, portal_session, auth, backend):
    backend.on("POST", "/api/login", status=401, json={"message": "Invalid."})
    outcome = services.login(db_session, portal_session, auth, email="a@b.ph", password="pw")
    assert not outcome.ok
    assert outcome.status == services.INVALID_CREDENTIALS

    backend.on("POST", "/api/login", status=422, json={"errors": {"email": ["The email field must be a valid email address."]}})
    outcome = services.login(db_session, portal_session, auth, email="a", password="pw")
    assert outcome.errors == {"email": ["The email field must be a valid email address."]}

    backend.on("POST", "/api/login", status=403, json={"message": "Account disabled."})
    outcome = services.login(db_session, portal_session, auth, email="a@b.ph", password="pw")
    assert outcome.status == "Account disabled."


def test_login_propagates_an_unreachable_backend(db_session, portal_session, auth, backend):
    def _down(call):
        raise httpx.ConnectTimeout("timed out")

    backend.on_call("POST", "/api/login", _down)
    with pytest.raises(BackendUnavailable):
        services.login(db_session, portal_session, auth, email="a@b.ph", password="pw")


def test_normalise_code_keeps_digits():
    assert services.normalise_code(" 12-34 56 ") == "123456"
    assert services.normalise_code("1234567") == "123456"
    assert services.normalise_code(None) == ""


def test_verify_code_requires_a_pending_user(db_session, portal_session, auth):
    outcome = services.verify_code(db_session, portal_session, auth, "123456")
    assert outcome.redirect_to == "/login"


def test_verify_code_rejects_short_codes_without_calling_backend(db_session, portal_session, auth, backend):
    services.set_pending_user(db_session, portal_session, 7)

    outcome = services.verify_code(db_session, portal_session, auth, "123")

    assert outcome.errors == {"code": [services.INCOMPLETE_CODE]}
    assert backend.calls == []


def test_verify_code_success_and_failure(db_session, portal_session, auth, backend):
    services.set_pending_user(db_session, portal_session, 7)

    backend.on("POST", "/api/verify-code", status=400, json={"message": "Invalid code."})
    outcome = services.verify_code(db_session, portal_session, auth, "000000")
    assert outcome.status == services.VERIFICATION_FAILED
    assert portal_session.pending_user_id == 7

    backend.on("POST", "/api/verify-code", json={"access_token": "tok-2"})
    outcome = services.verify_code(db_session, portal_session, auth, "123456")
    assert outcome.redirect_to == "/"
    assert outcome.session.auth_token == "tok-2"
    assert outcome.session.pending_user_id is None
    assert db_session.query(models.PortalSession).count() == 1
    assert backend.last("POST", "/api/verify-code").json == {"user_id": 7, "code": "123456"}


def test_resend_respects_the_cooldown(db_session, portal_session, auth, backend):
    now = models.utcnow()
    services.set_pending_user(db_session, portal_session, 7, now=now)
    backend.on("POST", "/api/resend-verification", json={"message": "A new code was sent."})

    sent, message = services.resend_code(db_session, portal_session, auth, now=now + timedelta(seconds=20))
    assert not sent
    assert message == "Please wait 40 seconds before requesting a new code."
    assert backend.calls_to("POST", "/api/resend-verification") == []

    later = now + timedelta(seconds=61)
    sent, message = services.resend_code(db_session, portal_session, auth, now=later)
    assert sent
    assert message == "A new code was sent."
    assert services.resend_seconds_remaining(portal_session, now=later) == services.OTP_RESEND_COOLDOWN_SEC


def test_resend_failure_reports_backend_message(db_session, portal_session, auth, backend):
    now = models.utcnow()
    services.set_pending_user(db_session, portal_session, 7, now=now - timedelta(minutes=5))
    backend.on("POST", "/api/resend-verification", status=429, json={"message": "Too many requests."})

    assert services.resend_code(db_session, portal_session, auth, now=now) == (False, "Too many requests.")


def test_logout_ends_session_even_when_backend_fails(db_session, portal_session, auth, backend):
    portal_session = services.store_auth_token(db_session, portal_session, "tok")
    backend.on("POST", "/api/logout", status=500, json={"message": "boom"})

    services.logout(db_session, portal_session, auth)

    assert db_session.query(models.PortalSession).count() == 0
    assert len(backend.calls_to("POST", "/api/logout")) == 1


def test_signing_in_replaces_the_pre_login_session(db_session, portal_session):
    anonymous_id = portal_session.id
    services.add_flash(db_session, portal_session, "success", "Welcome back.")

    signed_in = services.store_auth_token(db_session, portal_session, "tok")

    assert signed_in.id != anonymous_id
    assert signed_in.auth_token == "tok"
    assert db_session.get(models.PortalSession, anonymous_id) is None
    assert services.pop_flashes(db_session, signed_in) == [{"level": "success", "message": "Welcome back."}]
