from __future__ import annotations

ASSIGNMENTS = [
    {
        "id": 1,
        "status": "active",
        "assigned_at": "2024-03-01T08:00:00Z",
        "assignable_type": "employee",
        "assignable": {"id": 4, "first_name": "Ana", "last_name": "Cruz"},
        "asset": {"item_code": "NOD-LAP-001", "item": {"name": "Laptop"}},
        "condition_on_assign": "good",
    },
    {
        "id": 2,
        "status": "returned",
        "assigned_at": "2024-01-10",
        "returned_at": "2024-02-10",
        "assignable_type": "department",
        "assignable": {"id": 2, "name": "Finance"},
        "asset": {"item_code": "NOD-PRJ-001", "item": {"name": "Projector"}},
        "condition_on_assign": "new",
    },
]


def test_history_is_read_only(client, backend, login_as):
    login_as()
    backend.collection("/api/asset-assignments", ASSIGNMENTS)

    response = client.get("/asset-assignments")

    assert response.status_code == 200
    assert "Ana Cruz" in response.text
    assert "/asset-assignments/new" not in response.text
    assert client.get("/asset-assignments/new").status_code == 404


def test_search_by_assignee(client, backend, login_as):
    login_as()
    backend.collection("/api/asset-assignments", ASSIGNMENTS)

    response = client.get("/asset-assignments", params={"q": "finance"})

    assert "NOD-PRJ-001" in response.text
    assert "NOD-LAP-001" not in response.text
