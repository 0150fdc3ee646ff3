from __future__ import annotations

from invportal.tests.support import EMPLOYEE_USER

DEPARTMENTS = [
    {"id": i, "name": f"Department {i:02d}", "code": f"D{i:02d}", "description": None}
    for i in range(1, 13)
]


def test_list_is_paginated_ten_per_page(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)

    first = client.get("/departments")
    assert first.status_code == 200
    assert "Showing 1 to 10 of 12 results" in first.text
    assert "Department 10" in first.text
    assert "Department 11" not in first.text

    second = client.get("/departments", params={"page": 2})
    assert "Showing 11 to 12 of 12 results" in second.text
    assert "Department 12" in second.text


def test_out_of_range_page_shows_the_last_page(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)

    response = client.get("/departments", params={"page": 99})

    assert "Showing 11 to 12 of 12 results" in response.text


def test_search_matches_name_or_code(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)

    response = client.get("/departments", params={"q": "d07"})

    assert "Department 07" in response.text
    assert "Department 08" not in response.text
    assert "Showing 1 to 1 of 1 results" in response.text


def test_empty_list_message(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", [])

    response = client.get("/departments")

    assert "No departments found." in response.text


def test_blank_required_fields_never_reach_backend(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)

    response = client.post("/departments", data={"name": "  ", "code": "", "description": ""})

    assert response.status_code == 422
    assert "This field is required." in response.text
    assert backend.calls_to("POST", "/api/departments") == []


def test_create_sends_trimmed_payload_and_flashes(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)
    backend.on("POST", "/api/departments", status=201, json={"data": {"id": 13}})

    response = client.post(
        "/departments",
        data={"name": " Procurement ", "code": "PRC", "description": ""},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/departments"
    assert backend.last("POST", "/api/departments").json == {
        "name": "Procurement",
        "code": "PRC",
        "description": None,
    }
    assert "Department created." in client.get("/departments").text


def test_backend_validation_errors_reopen_the_dialog(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)
    backend.on(
        "POST",
        "/api/departments",
        status=422,
        json={"message": "The given data was invalid.", "errors": {"code": ["The code has already been taken."]}},
    )

    response = client.post("/departments", data={"name": "Procurement", "code": "D01"})

    assert response.status_code == 422
    assert "Add Department" in response.text
    assert "The code has already been taken." in response.text


def test_edit_dialog_is_prefilled(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)
    backend.on("GET", "/api/departments/3", json={"data": DEPARTMENTS[2]})

    response = client.get("/departments/3/edit")

    assert response.status_code == 200
    assert "Edit Department" in response.text
    assert 'value="D03"' in response.text
    assert 'action="/departments/3"' in response.text


def test_update_puts_to_the_record(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)
    backend.on("PUT", "/api/departments/3", json={"data": DEPARTMENTS[2]})

    response = client.post("/departments/3", data={"name": "Finance", "code": "FIN"}, follow_redirects=False)

    assert response.status_code == 303
    assert backend.last("PUT", "/api/departments/3").json["name"] == "Finance"


def test_delete_failure_flashes_related_records_message(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)
    backend.on("DELETE", "/api/departments/2", status=409, json={"message": "Integrity constraint"})

    response = client.post("/departments/2/delete")

    assert response.status_code == 200
    assert "Cannot delete: department has related records." in response.text
    assert "Integrity constraint" not in response.text


def test_delete_success(client, backend, login_as):
    login_as()
    backend.collection("/api/departments", DEPARTMENTS)
    backend.on("DELETE", "/api/departments/2", status=204)

    response = client.post("/departments/2/delete")

    assert "Department deleted." in response.text
    assert len(backend.calls_to("DELETE", "/api/departments/2")) == 1


def test_employee_with_permission_can_open_page(client, backend, login_as):
    login_as(EMPLOYEE_USER)
    backend.collection("/api/departments", DEPARTMENTS)

    assert client.get("/departments").status_code == 200
    assert client.get("/units").status_code == 403
