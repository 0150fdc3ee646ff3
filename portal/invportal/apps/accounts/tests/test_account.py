from __future__ import annotations

from invportal.tests.support import ADMIN_USER


def test_account_page_prefills_profile(client, login_as):
    login_as()

    response = client.get("/account")

    assert response.status_code == 200
    assert 'value="Ada Reyes"' in response.text
    assert ">AR<" in response.text.replace(" ", "").replace("\n", "")


def test_profile_update(client, backend, login_as):
    login_as()
    backend.on("PUT", "/api/account", json={"data": {**ADMIN_USER, "name": "Ada R."}})

    response = client.post("/account/profile", data={"name": "Ada R.", "email": "admin@nod.gov.ph"})

    assert response.status_code == 200
    assert "Profile updated successfully." in response.text
    assert backend.last("PUT", "/api/account").json == {"name": "Ada R.", "email": "admin@nod.gov.ph"}


def test_profile_validation_errors_from_backend(client, backend, login_as):
    login_as()
    backend.on("PUT", "/api/account", status=422, json={"errors": {"email": ["The email has already been taken."]}})

    response = client.post("/account/profile", data={"name": "Ada", "email": "taken@nod.gov.ph"})

    assert response.status_code == 422
    assert "The email has already been taken." in response.text


def test_profile_failure_flashes_generic_message(client, backend, login_as):
    login_as()
    backend.on("PUT", "/api/account", status=500, json={"message": "SQLSTATE"})

    response = client.post("/account/profile", data={"name": "Ada", "email": "admin@nod.gov.ph"})

    assert "Failed to update profile." in response.text
    assert "SQLSTATE" not in response.text


def _field_error(message: str) -> str:
    return f'<p class="mt-1 text-xs text-red-600">{message}</p>'


def test_password_checks_run_before_calling_backend(client, backend, login_as):
    login_as()

    missing_current = client.post("/account/password", data={"password": "New1!", "password_confirmation": "New1!"})
    assert missing_current.status_code == 422
    assert _field_error("Current password is required.") in missing_current.text
    assert 'role="status"' not in missing_current.text

    missing_new = client.post("/account/password", data={"current_password": "Old1!"})
    assert missing_new.status_code == 422
    assert _field_error("New password is required.") in missing_new.text

    mismatch = client.post(
        "/account/password",
        data={"current_password": "Old1!", "password": "New1!", "password_confirmation": "New2!"},
        follow_redirects=False,
    )
    assert mismatch.status_code == 422
    assert _field_error("Passwords do not match.") in mismatch.text
    assert backend.calls_to("PUT", "/api/account") == []


def test_password_update_sends_profile_and_password_fields(client, backend, login_as):
    login_as()
    backend.on("PUT", "/api/account", json={"message": "ok"})

    response = client.post(
        "/account/password",
        data={"current_password": "Old1!", "password": "New1!", "password_confirmation": "New1!"},
    )

    assert "Password updated successfully." in response.text
    assert backend.last("PUT", "/api/account").json == {
        "name": "Ada Reyes",
        "email": "admin@nod.gov.ph",
        "current_password": "Old1!",
        "password": "New1!",
        "password_confirmation": "New1!",
    }
