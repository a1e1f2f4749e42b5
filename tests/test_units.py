from __future__ import annotations

from fastapi.testclient import TestClient

from utils.auth_utils import EDIT_INVENTORY, VIEW_INVENTORY


def test_units_are_listed_by_name(client: TestClient) -> None:
    for name in ("kg", "box", "bunch"):
        assert client.post("/units/", json={"name": name}).status_code == 201

    response = client.get("/units/")

    assert response.status_code == 200
    assert [u["name"] for u in response.json()] == ["box", "bunch", "kg"]


def test_duplicate_unit_is_rejected(client: TestClient) -> None:
    client.post("/units/", json={"name": "kg"})

    response = client.post("/units/", json={"name": "kg"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Unit already exists.", "code": "invalid_state", "field": "name"}


def test_unit_name_is_required(client: TestClient) -> None:
    response = client.post("/units/", json={"name": "  "})

    assert response.status_code == 400
    assert response.json()["code"] == "missing_fields"
    assert client.get("/units/").json() == []


def test_update_and_delete_unit(client: TestClient) -> None:
    kg = client.post("/units/", json={"name": "kg"}).json()
    client.post("/units/", json={"name": "box"})

    renamed = client.put(f"/units/{kg['id']}", json={"name": "kilogram"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "kilogram"

    clash = client.put(f"/units/{kg['id']}", json={"name": "box"})
    assert clash.status_code == 400
    assert clash.json()["code"] == "invalid_state"

    assert client.delete(f"/units/{kg['id']}").status_code == 204
    assert [u["name"] for u in client.get("/units/").json()] == ["box"]
    assert client.put(f"/units/{kg['id']}", json={"name": "kg"}).status_code == 404


def test_unit_writes_need_edit_inventory(client_as) -> None:
    viewer = client_as(VIEW_INVENTORY)
    assert viewer.get("/units/").status_code == 200
    assert viewer.post("/units/", json={"name": "kg"}).status_code == 403

    editor = client_as(VIEW_INVENTORY, EDIT_INVENTORY)
    assert editor.post("/units/", json={"name": "kg"}).status_code == 201
