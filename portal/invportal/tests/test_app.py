from __future__ import annotations

from datetime import timedelta

from invportal import serve
from invportal.apps.accounts import models
from invportal.apps.accounts import services as account_services
from invportal.jobs import session_cleanup


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_unknown_page_renders_not_found(client):
    response = client.get("/no-such-page")
    assert response.status_code == 404
    assert "Page not found" in response.text


def test_missing_record_renders_not_found(client, backend, login_as):
    login_as()
    backend.collection("/api/units", [])
    backend.on("GET", "/api/units/99", status=404, json={"message": "No query results."})

    response = client.get("/units/99/edit")

    assert response.status_code == 404
    assert "Unit not found." in response.text


def test_session_cleanup_job_purges_expired_rows(db_session, session_factory, monkeypatch):
    now = models.utcnow()
    live = account_services.open_session(db_session, now=now)
    expired = account_services.open_session(db_session, now=now - timedelta(days=2))
    monkeypatch.setattr(session_cleanup, "SessionLocal", session_factory)

    assert session_cleanup.run() == 1

    remaining = {row.id for row in db_session.query(models.PortalSession.id).all()}
    assert remaining == {live.id}
    assert expired.id not in remaining


def test_serve_options_read_environment(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-number")
    monkeypatch.setenv("RELOAD", "yes")
    monkeypatch.setenv("SSL_CERTFILE", "/etc/portal/cert.pem")
    monkeypatch.delenv("SSL_KEYFILE", raising=False)
    monkeypatch.delenv("SSL_CA_CERTS", raising=False)
    monkeypatch.delenv("SSL_KEYFILE_PASSWORD", raising=False)

    options = serve.uvicorn_options()

    assert options["port"] == serve.DEFAULT_PORT
    assert options["reload"] is True
    assert options["proxy_headers"] is True
    assert options["ssl_certfile"] == "/etc/portal/cert.pem"
    assert "ssl_keyfile" not in options
