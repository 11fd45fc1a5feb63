import pytest

from tests.conftest import auth_headers, register_user
from tests.test_sections import create_notebook, create_section


@pytest.fixture
def section(client, alice):
    return create_section(client, alice, "Work")


def test_example_scenario(client):
    data = register_user(client, username="ana", email="ana@x.com", password="secret1")
    headers = auth_headers(data["token"])

    section = create_section(client, headers, "Work")
    notebook = create_notebook(client, headers, section["id"], name="Todo", content="")

    response = client.patch(
        f"/api/notebooks/{notebook['id']}/content",
        json={"content": "<p>hi</p>"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Content saved successfully"

    response = client.get(f"/api/notebooks/{notebook['id']}", headers=headers)
    assert response.json()["content"] == "<p>hi</p>"

    response = client.delete(f"/api/sections/{section['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["deletedNotebooks"] == 1

    response = client.get(f"/api/notebooks/{notebook['id']}", headers=headers)
    assert response.status_code == 404
    assert response.json()["code"] == "NOTEBOOK_NOT_FOUND"


def test_content_roundtrip_is_exact(client, alice, section):
    content = '<h1>Заметки</h1>\n<p>a &amp; b <b>"quoted"</b> 100% _done_ \\ 🙂</p>'

    notebook = create_notebook(client, alice, section["id"], content=content)
    fetched = client.get(f"/api/notebooks/{notebook['id']}", headers=alice).json()

    assert notebook["content"] == content
    assert fetched["content"] == content


def test_create_notebook_defaults_to_empty_content(client, alice, section):
    response = client.post(
        "/api/notebooks", json={"name": "Empty", "section_id": section["id"]}, headers=alice
    )

    assert response.status_code == 201
    assert response.json()["content"] == ""


def test_create_notebook_without_section_id(client, alice):
    response = client.post("/api/notebooks", json={"name": "Orphan"}, headers=alice)

    assert response.status_code == 400


def test_create_notebook_blank_name(client, alice, section):
    response = client.post(
        "/api/notebooks", json={"name": "  ", "section_id": section["id"]}, headers=alice
    )

    assert response.status_code == 400


def test_create_notebook_in_missing_section(client, alice):
    response = client.post(
        "/api/notebooks", json={"name": "Lost", "section_id": 999}, headers=alice
    )

    assert response.status_code == 404
    assert response.json()["code"] == "SECTION_NOT_FOUND"


def test_list_notebooks_with_filter(client, alice, section):
    other = create_section(client, alice, "Other")
    in_section = create_notebook(client, alice, section["id"], name="In")
    create_notebook(client, alice, other["id"], name="Out")

    everything = client.get("/api/notebooks", headers=alice).json()
    filtered = client.get(
        "/api/notebooks", params={"section_id": section["id"]}, headers=alice
    ).json()

    assert len(everything) == 2
    assert [n["id"] for n in filtered] == [in_section["id"]]


def test_update_notebook_partial(client, alice, section):
    notebook = create_notebook(client, alice, section["id"], name="Draft", content="<p>x</p>")

    response = client.put(
        f"/api/notebooks/{notebook['id']}", json={"name": "Final"}, headers=alice
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Notebook updated successfully"
    assert body["notebook"]["name"] == "Final"
    assert body["notebook"]["content"] == "<p>x</p>"
    assert body["notebook"]["section_id"] == section["id"]


def test_update_notebook_moves_to_other_section(client, alice, section):
    other = create_section(client, alice, "Other")
    notebook = create_notebook(client, alice, section["id"])

    response = client.put(
        f"/api/notebooks/{notebook['id']}", json={"section_id": other["id"]}, headers=alice
    )

    assert response.status_code == 200
    assert response.json()["notebook"]["section_id"] == other["id"]


def test_update_notebook_to_missing_section(client, alice, section):
    notebook = create_notebook(client, alice, section["id"])

    response = client.put(
        f"/api/notebooks/{notebook['id']}", json={"section_id": 999}, headers=alice
    )

    assert response.status_code == 404


def test_update_content_only_touches_content(client, alice, section):
    notebook = create_notebook(client, alice, section["id"], name="Keep", content="old")

    response = client.patch(
        f"/api/notebooks/{notebook['id']}/content", json={"content": "new"}, headers=alice
    )
    assert response.status_code == 200

    fetched = client.get(f"/api/notebooks/{notebook['id']}", headers=alice).json()
    assert fetched["content"] == "new"
    assert fetched["name"] == "Keep"
    assert fetched["section_id"] == section["id"]
    assert fetched["created_at"] == notebook["created_at"]
    assert fetched["updated_at"] >= notebook["updated_at"]
    assert response.json()["updated_at"] == fetched["updated_at"]


def test_update_content_requires_content(client, alice, section):
    notebook = create_notebook(client, alice, section["id"])

    response = client.patch(f"/api/notebooks/{notebook['id']}/content", json={}, headers=alice)

    assert response.status_code == 400


def test_update_content_missing_notebook(client, alice):
    response = client.patch("/api/notebooks/999/content", json={"content": "x"}, headers=alice)

    assert response.status_code == 404


def test_delete_notebook(client, alice, section):
    notebook = create_notebook(client, alice, section["id"])

    response = client.delete(f"/api/notebooks/{notebook['id']}", headers=alice)

    assert response.status_code == 200
    assert response.json() == {"message": "Notebook deleted successfully"}
    assert client.get(f"/api/notebooks/{notebook['id']}", headers=alice).status_code == 404
    assert client.delete(f"/api/notebooks/{notebook['id']}", headers=alice).status_code == 404


def test_duplicate_notebook_default_name(client, alice, section):
    notebook = create_notebook(client, alice, section["id"], name="Plan", content="<p>a</p>")

    response = client.post(f"/api/notebooks/{notebook['id']}/duplicate", headers=alice)

    assert response.status_code == 201
    copy = response.json()["notebook"]
    assert copy["id"] != notebook["id"]
    assert copy["name"] == "Plan - Copy"
    assert copy["content"] == "<p>a</p>"
    assert copy["section_id"] == section["id"]


def test_duplicate_notebook_into_other_section(client, alice, section):
    other = create_section(client, alice, "Archive")
    notebook = create_notebook(client, alice, section["id"], name="Plan")

    response = client.post(
        f"/api/notebooks/{notebook['id']}/duplicate",
        json={"name": "Plan v2", "section_id": other["id"]},
        headers=alice,
    )

    assert response.status_code == 201
    copy = response.json()["notebook"]
    assert copy["name"] == "Plan v2"
    assert copy["section_id"] == other["id"]


def test_duplicate_notebook_into_missing_section(client, alice, section):
    notebook = create_notebook(client, alice, section["id"])

    response = client.post(
        f"/api/notebooks/{notebook['id']}/duplicate", json={"section_id": 999}, headers=alice
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Target section not found"


def test_search_matches_name_and_content(client, alice, section):
    by_name = create_notebook(client, alice, section["id"], name="Grocery list")
    by_content = create_notebook(client, alice, section["id"], name="Misc", content="buy GROCERY")
    create_notebook(client, alice, section["id"], name="Other", content="nothing")

    response = client.get("/api/notebooks/search", params={"q": "grocery"}, headers=alice)

    assert response.status_code == 200
    assert {n["id"] for n in response.json()} == {by_name["id"], by_content["id"]}


def test_search_treats_wildcards_literally(client, alice, section):
    literal = create_notebook(client, alice, section["id"], name="100% done")
    create_notebook(client, alice, section["id"], name="1000 tasks")

    response = client.get("/api/notebooks/search", params={"q": "100%"}, headers=alice)

    assert [n["id"] for n in response.json()] == [literal["id"]]


def test_search_within_section(client, alice, section):
    other = create_section(client, alice, "Other")
    inside = create_notebook(client, alice, section["id"], name="idea one")
    create_notebook(client, alice, other["id"], name="idea two")

    response = client.get(
        "/api/notebooks/search",
        params={"q": "idea", "section_id": section["id"]},
        headers=alice,
    )

    assert [n["id"] for n in response.json()] == [inside["id"]]


@pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
def test_search_requires_query(client, alice, params):
    response = client.get("/api/notebooks/search", params=params, headers=alice)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_notebooks_are_invisible_to_other_users(client, alice, bob, section):
    notebook = create_notebook(client, alice, section["id"], name="Secret", content="secret")
    notebook_id = notebook["id"]

    assert client.get("/api/notebooks", headers=bob).json() == []
    assert client.get(f"/api/notebooks/{notebook_id}", headers=bob).status_code == 404
    assert client.get(
        "/api/notebooks/search", params={"q": "secret"}, headers=bob
    ).json() == []
    assert client.get(f"/api/sections/{section['id']}/notebooks", headers=bob).status_code == 404
    assert client.put(
        f"/api/notebooks/{notebook_id}", json={"name": "Mine"}, headers=bob
    ).status_code == 404
    assert client.patch(
        f"/api/notebooks/{notebook_id}/content", json={"content": "x"}, headers=bob
    ).status_code == 404
    assert client.post(f"/api/notebooks/{notebook_id}/duplicate", headers=bob).status_code == 404
    assert client.delete(f"/api/notebooks/{notebook_id}", headers=bob).status_code == 404

    fetched = client.get(f"/api/notebooks/{notebook_id}", headers=alice).json()
    assert fetched["name"] == "Secret"
    assert fetched["content"] == "secret"


def test_cannot_create_notebook_in_foreign_section(client, alice, bob, section):
    response = client.post(
        "/api/notebooks", json={"name": "Intrusion", "section_id": section["id"]}, headers=bob
    )

    assert response.status_code == 404
