from __future__ import annotations

CATEGORIES = [
    {"id": 1, "name": "ICT Equipment", "code": "ICT", "parent_id": None, "children_count": 1},
    {"id": 2, "name": "Laptops", "code": "LAP", "parent_id": 1, "parent": {"id": 1, "name": "ICT Equipment"}},
    {"id": 3, "name": "Office Supplies", "code": "OFS", "parent_id": None},
]


def test_level_filter(client, backend, login_as):
    login_as()
    backend.collection("/api/categories", CATEGORIES)

    subs = client.get("/categories", params={"level": "sub"})
    assert "Laptops" in subs.text
    assert "Office Supplies" not in subs.text

    tops = client.get("/categories", params={"level": "top"})
    assert "Office Supplies" in tops.text
    assert "Laptops" not in tops.text


def test_parent_choices_are_top_level_only(client, backend, login_as):
    login_as()
    backend.collection("/api/categories", CATEGORIES)

    response = client.get("/categories/new")

    assert '<option value="1"' in response.text
    assert '<option value="3"' in response.text
    assert '<option value="2"' not in response.text
    assert "None (top-level)" in response.text


def test_blank_parent_is_sent_as_null(client, backend, login_as):
    login_as()
    backend.collection("/api/categories", CATEGORIES)
    backend.on("POST", "/api/categories", status=201, json={"data": {"id": 4}})

    client.post(
        "/categories",
        data={"name": "Furniture", "code": "FUR", "parent_id": "", "description": ""},
        follow_redirects=False,
    )

    assert backend.last("POST", "/api/categories").json == {
        "name": "Furniture",
        "code": "FUR",
        "parent_id": None,
        "description": None,
    }


def test_delete_blocked_by_backend(client, backend, login_as):
    login_as()
    backend.collection("/api/categories", CATEGORIES)
    backend.on("DELETE", "/api/categories/1", status=422, json={"message": "Has children"})

    response = client.post("/categories/1/delete")

    assert "Cannot delete: category has sub-categories or items." in response.text
