from __future__ import annotations

from invportal.tests.support import ADMIN_USER

USERS = [
    dict(ADMIN_USER, department=None),
    {
        "id": 5,
        "name": "Cora Lim",
        "email": "cora@nod.gov.ph",
        "user_type": "employee",
        "department_id": 2,
        "department": {"id": 2, "name": "Finance"},
        "permissions": ["items", "units"],
    },
]


def _stub(backend):
    backend.collection("/api/users", USERS)
    backend.collection("/api/departments", [{"id": 2, "name": "Finance"}])


def test_list_shows_roles_and_permission_counts(client, backend, login_as):
    login_as()
    _stub(backend)

    response = client.get("/users")

    assert response.status_code == 200
    assert "Administrator" in response.text
    assert "2 permissions" in response.text
    assert "Cannot delete own account" in response.text


def test_role_filter(client, backend, login_as):
    login_as()
    _stub(backend)

    response = client.get("/users", params={"role": "employee"})

    assert "Cora Lim" in response.text
    assert "admin@nod.gov.ph" not in response.text.split("<tbody")[1]


def test_cannot_delete_own_account(client, backend, login_as):
    login_as()
    _stub(backend)

    response = client.post("/users/1/delete")

    assert "Cannot delete own account" in response.text
    assert backend.calls_to("DELETE", "/api/users/1") == []


def test_delete_failure_surfaces_backend_message(client, backend, login_as):
    login_as()
    _stub(backend)
    backend.on("DELETE", "/api/users/5", status=409, json={"message": "User has open assignments."})

    response = client.post("/users/5/delete")

    assert "User has open assignments." in response.text


def test_create_employee_keeps_only_known_permissions(client, backend, login_as):
    login_as()
    _stub(backend)
    backend.on("POST", "/api/users", status=201, json={"data": {"id": 9}})

    response = client.post(
        "/users",
        data={
            "name": "Dan Cruz",
            "email": "dan@nod.gov.ph",
            "user_type": "employee",
            "department_id": "2",
            "password": "Str0ng!pass",
            "password_confirmation": "Str0ng!pass",
            "permissions": ["items", "not-a-page"],
        },
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert backend.last("POST", "/api/users").json == {
        "name": "Dan Cruz",
        "email": "dan@nod.gov.ph",
        "user_type": "employee",
        "department_id": 2,
        "permissions": ["items"],
        "password": "Str0ng!pass",
        "password_confirmation": "Str0ng!pass",
    }


def test_administrators_get_null_department_and_permissions(client, backend, login_as):
    login_as()
    _stub(backend)
    backend.on("POST", "/api/users", status=201, json={"data": {"id": 9}})

    client.post(
        "/users",
        data={
            "name": "Eve Admin",
            "email": "eve@nod.gov.ph",
            "user_type": "system_administrator",
            "department_id": "2",
            "password": "Str0ng!pass",
            "password_confirmation": "Str0ng!pass",
            "permissions": ["items"],
        },
        follow_redirects=False,
    )

    payload = backend.last("POST", "/api/users").json
    assert payload["department_id"] is None
    assert payload["permissions"] is None


def test_password_required_on_create_only(client, backend, login_as):
    login_as()
    _stub(backend)
    backend.on("PUT", "/api/users/5", json={"data": USERS[1]})

    created = client.post("/users", data={"name": "Dan", "email": "dan@nod.gov.ph", "user_type": "employee"})
    assert created.status_code == 422
    assert "The password field is required." in created.text

    client.post(
        "/users/5",
        data={"name": "Cora Lim", "email": "cora@nod.gov.ph", "user_type": "employee", "department_id": "2"},
        follow_redirects=False,
    )
    payload = backend.last("PUT", "/api/users/5").json
    assert "password" not in payload


def test_password_confirmation_must_match(client, backend, login_as):
    login_as()
    _stub(backend)

    response = client.post(
        "/users",
        data={
            "name": "Dan",
            "email": "dan@nod.gov.ph",
            "user_type": "employee",
            "password": "one",
            "password_confirmation": "two",
        },
    )

    assert response.status_code == 422
    assert "The password field confirmation does not match." in response.text
    assert backend.calls_to("POST", "/api/users") == []


def test_generate_prefills_a_suggested_password(client, backend, login_as):
    login_as()
    _stub(backend)

    response = client.get("/users/new", params={"generate": "1"})

    assert response.status_code == 200
    assert "Suggested password:" in response.text


def test_edit_dialog_checks_granted_permissions(client, backend, login_as):
    login_as()
    _stub(backend)
    backend.on("GET", "/api/users/5", json={"data": USERS[1]})

    response = client.get("/users/5/edit")

    assert "Edit User" in response.text
    assert 'value="units" checked' in response.text
    assert 'value="categories" checked' not in response.text
