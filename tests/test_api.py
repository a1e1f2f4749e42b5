from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from builders import line, make_customer, make_item, make_provider, reload
from models.orders import Order
from utils.auth_utils import VIEW_ORDERS


def _create_order(client: TestClient, customer_id: int, *lines: dict):
    return client.post("/orders/", json={"customerId": customer_id, "items": list(lines), "notes": "Back door"})


def test_create_order_returns_created_order(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100", price_per_unit="2.50")
    customer = make_customer(db_session, items=[tomato])

    response = _create_order(client, customer.id, line(tomato, "5"))

    assert response.status_code == 201
    body = response.json()
    assert body["warnings"] == []
    order = body["order"]
    assert order["status"] == "PENDING"
    assert Decimal(order["totalAmount"]) == Decimal("12.50")
    assert order["customer"]["name"] == "C1"
    assert order["notes"] == "Back door"
    (item,) = order["items"]
    assert item["adminItemId"] == tomato.id
    assert item["itemName"] == "Tomato"
    assert Decimal(item["pricePerUnit"]) == Decimal("2.50")
    assert Decimal(item["totalPrice"]) == Decimal("12.50")
    assert reload(db_session, tomato).quantity == Decimal("95")


def test_create_order_with_insufficient_stock_warns(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session, quantity="2")
    customer = make_customer(db_session)

    response = _create_order(client, customer.id, line(tomato, "5"))

    assert response.status_code == 201
    (warning,) = response.json()["warnings"]
    assert warning["itemName"] == "Tomato"
    assert Decimal(warning["requested"]) == Decimal("5")
    assert Decimal(warning["available"]) == Decimal("2")


def test_empty_items_is_400(client: TestClient, db_session: Session) -> None:
    customer = make_customer(db_session)

    response = _create_order(client, customer.id)

    assert response.status_code == 400
    assert response.json() == {
        "detail": "customerId and items array are required.",
        "code": "missing_fields",
        "field": "items",
    }
    assert db_session.query(Order).count() == 0


def test_unknown_customer_is_404(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session)

    response = _create_order(client, 77, line(tomato))

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_malformed_body_is_400(client: TestClient, db_session: Session) -> None:
    response = client.post("/orders/", json={"customerId": 1, "items": [{"adminItemId": 1, "quantity": "lots", "unit": "kg"}]})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_status_flow_over_http(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order_id = _create_order(client, customer.id, line(tomato, "5")).json()["order"]["id"]

    bad = client.put(f"/orders/{order_id}/status", json={"status": "DELIVERED"})
    assert bad.status_code == 400
    assert bad.json()["code"] == "invalid_transition"

    same = client.put(f"/orders/{order_id}/status", json={"status": "PENDING"})
    assert same.json()["code"] == "no_op"

    shipped = client.put(f"/orders/{order_id}/status", json={"status": "SHIPPED"})
    assert shipped.status_code == 200
    assert shipped.json()["status"] == "SHIPPED"

    delete = client.delete(f"/orders/{order_id}")
    assert delete.status_code == 400
    assert delete.json()["code"] == "invalid_state"

    cancelled = client.post(f"/orders/{order_id}/cancel")
    assert cancelled.json()["status"] == "CANCELLED"
    assert reload(db_session, tomato).quantity == Decimal("100")

    again = client.post(f"/orders/{order_id}/cancel")
    assert again.status_code == 400
    assert again.json()["code"] == "invalid_state"


def test_delete_pending_order_over_http(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order_id = _create_order(client, customer.id, line(tomato, "5")).json()["order"]["id"]

    response = client.delete(f"/orders/{order_id}")

    assert response.status_code == 200
    assert response.json()["inventoryRestored"] is True
    assert client.get(f"/orders/{order_id}").status_code == 404
    assert reload(db_session, tomato).quantity == Decimal("100")


def test_add_item_and_listing(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato", quantity="100", price_per_unit="2.50")
    basil = make_item(db_session, name="Basil", quantity="100", price_per_unit="1.00", unit="bunch")
    customer = make_customer(db_session, items=[tomato, basil])
    order_id = _create_order(client, customer.id, line(tomato, "5")).json()["order"]["id"]

    added = client.post(f"/orders/{order_id}/items", json=line(basil, "2", unit="bunch"))
    assert added.status_code == 200
    assert Decimal(added.json()["order"]["totalAmount"]) == Decimal("14.50")

    listed = client.get("/orders/", params={"customerId": customer.id, "status": "PENDING"})
    assert [o["id"] for o in listed.json()] == [order_id]

    summary = client.get("/orders/summary").json()
    assert summary["totalOrders"] == 1
    assert summary["byStatus"]["PENDING"] == 1

    available = client.get(f"/orders/customer/{customer.id}/available-items").json()
    assert {a["name"] for a in available} == {"Tomato", "Basil"}
    assert all(a["inStock"] for a in available)


def test_check_stock_and_receive(client: TestClient, db_session: Session) -> None:
    provider = make_provider(db_session)
    lettuce = make_item(db_session, name="Lettuce", quantity="15", provider=provider)
    make_item(db_session, name="Onion", quantity="25", provider=provider)

    first = client.post("/provider-orders/check-stock")
    assert first.status_code == 200
    body = first.json()
    assert body["lowStockItemsCount"] == 1
    (provider_order_id,) = body["createdOrderIds"]
    assert body["lines"][0]["adminItemId"] == lettuce.id

    second = client.post("/provider-orders/check-stock").json()
    assert second["createdOrderIds"] == []
    assert second["appendedOrderIds"] == []

    fetched = client.get(f"/provider-orders/{provider_order_id}").json()
    assert fetched["provider"]["id"] == provider.id
    assert len(fetched["items"]) == 1

    received = client.patch(f"/provider-orders/{provider_order_id}/status", json={"status": "RECEIVED"})
    assert received.status_code == 200
    assert reload(db_session, lettuce).quantity == Decimal("40")


def test_inventory_endpoints(client: TestClient, db_session: Session) -> None:
    created = client.post("/inventory-items/", json={
        "name": "Olive oil",
        "unit": "liters",
        "quantity": "12",
        "pricePerUnit": "6.40",
        "lowStockAlert": "15",
    })
    assert created.status_code == 201
    item_id = created.json()["id"]
    assert Decimal(created.json()["quantity"]) == Decimal("12")

    low = client.get("/inventory-items/low-stock").json()
    assert [i["id"] for i in low] == [item_id]

    too_much = client.post(f"/inventory-items/{item_id}/adjust", json={"adjustment": "-20"})
    assert too_much.status_code == 400
    assert too_much.json()["code"] == "invalid_state"

    adjusted = client.post(f"/inventory-items/{item_id}/adjust", json={"adjustment": "8", "reason": "Delivery count"})
    assert adjusted.status_code == 200
    assert Decimal(adjusted.json()["newQuantity"]) == Decimal("20")

    history = client.get(f"/inventory-items/{item_id}/audit").json()
    assert [h["changeType"] for h in history] == ["adjustment", "adjustment"]

    summary = client.get("/inventory-items/summary").json()
    assert summary["lowStockCount"] == 0
    assert Decimal(summary["totalValue"]) == Decimal("128.00")

    duplicate = client.post("/inventory-items/", json={"name": "Olive oil"})
    assert duplicate.status_code == 400


def test_customer_inventory_grants(client: TestClient, db_session: Session) -> None:
    tomato = make_item(db_session, name="Tomato")
    created = client.post("/customers/", json={"name": "Corner Shop", "email": "buyer@cornershop.com"})
    assert created.status_code == 201
    customer_id = created.json()["id"]

    granted = client.post(f"/customers/{customer_id}/inventory", json={"adminItemIds": [tomato.id, tomato.id]})
    assert granted.status_code == 200
    assert [i["adminItemId"] for i in granted.json()["items"]] == [tomato.id]

    missing = client.post(f"/customers/{customer_id}/inventory", json={"adminItemIds": [999]})
    assert missing.status_code == 404

    revoked = client.delete(f"/customers/{customer_id}/inventory/{tomato.id}")
    assert revoked.json()["items"] == []


def test_permissions_are_enforced(client_as, db_session: Session) -> None:
    customer = make_customer(db_session)
    viewer = client_as(VIEW_ORDERS)

    assert viewer.get("/orders/").status_code == 200
    response = viewer.post("/orders/", json={"customerId": customer.id, "items": []})
    assert response.status_code == 403
    assert viewer.post("/provider-orders/check-stock").status_code == 403


def test_configuration_writes_need_admin(client_as, db_session: Session) -> None:
    staff = client_as(VIEW_ORDERS)
    assert staff.post("/configurations/", json={"name": "RESTOCK_TARGET_MULTIPLIER", "value": "3"}).status_code == 403

    admin = client_as(role="Admin")
    created = admin.post("/configurations/", json={"name": "RESTOCK_TARGET_MULTIPLIER", "value": "3"})
    assert created.status_code == 201
    updated = admin.patch("/configurations/RESTOCK_TARGET_MULTIPLIER/", json={"value": "2.5"})
    assert updated.json()["value"] == "2.5"
    assert admin.get("/configurations/", params={"name": "RESTOCK_TARGET_MULTIPLIER"}).json()[0]["value"] == "2.5"


def test_audit_log_lists_order_changes_for_admins(client: TestClient, client_as, db_session: Session) -> None:
    tomato = make_item(db_session, quantity="100")
    customer = make_customer(db_session)
    order_id = _create_order(client, customer.id, line(tomato, "5")).json()["order"]["id"]
    client.post(f"/orders/{order_id}/cancel")

    response = client.get("/audit-logs/", params={"tableName": "orders", "recordId": order_id})

    assert response.status_code == 200
    (entry,) = response.json()
    assert entry["tableName"] == "orders"
    assert entry["recordId"] == order_id
    assert entry["action"] == "UPDATE"
    assert entry["changedBy"] == "admin"
    assert entry["newValues"]["status"] == "CANCELLED"

    assert client.get("/audit-logs/", params={"tableName": "providers"}).json() == []
    assert client_as(VIEW_ORDERS).get("/audit-logs/").status_code == 403
