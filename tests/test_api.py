from decimal import Decimal

import httpx
from jose import jwt

from order_pipeline import auth
from order_pipeline.config import ALGORITHM, SECRET_KEY
from order_pipeline.main import app


def _order_payload(items=((1, 2),), card_number="4111111111111111"):
    payload = {
        "customer_name": "Ada Lovelace",
        "total_amount": "25.00",
        "items": [{"product_id": p, "quantity": q} for p, q in items],
    }
    if card_number is not None:
        payload["payment_details"] = {"payment_method": "CREDIT_CARD", "card_number": card_number}
    return payload


def _stock(client, product_id, available_quantity):
    response = client.post("/inventory", json={"product_id": product_id, "available_quantity": available_quantity})
    assert response.status_code == 201


def _create(client, **kwargs):
    response = client.post("/orders", json=_order_payload(**kwargs))
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/healthz").json() == {"status": "healthy"}


def test_create_and_get_order(client):
    created = _create(client)

    assert created["status"] == "PENDING"
    assert Decimal(created["total_amount"]) == Decimal("25.00")
    assert created["payment_details"]["card_number"] == "************1111"

    fetched = client.get(f"/orders/{created['id']}").json()
    assert fetched["items"] == [{"product_id": 1, "quantity": 2}]
    assert [order["id"] for order in client.get("/orders").json()] == [created["id"]]


def test_create_order_rejects_invalid_input(client):
    assert client.post("/orders", json=_order_payload(items=[])).status_code == 400
    assert client.post("/orders", json=_order_payload(items=[(1, 0)])).status_code == 422

    payload = _order_payload()
    payload["total_amount"] = "-1"
    assert client.post("/orders", json=payload).status_code == 422


def test_get_missing_order_returns_404(client):
    assert client.get("/orders/999").status_code == 404


def test_place_order_marks_it_placed(client):
    _stock(client, 1, 5)
    order = _create(client, items=[(1, 2)])

    response = client.post(f"/orders/{order['id']}/place")

    assert response.status_code == 200
    assert response.json()["status"] == "PLACED"
    timeline = client.get(f"/orders/{order['id']}/timeline").json()
    assert [event["event_type"] for event in timeline] == ["created", "placed"]


def test_place_order_with_insufficient_inventory(client):
    _stock(client, 2, 3)
    order = _create(client, items=[(2, 10)])

    response = client.post(f"/orders/{order['id']}/place")

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InsufficientInventory"
    assert client.get(f"/orders/{order['id']}").json()["status"] == "PENDING"


def test_place_order_without_payment_details(client):
    _stock(client, 1, 5)
    order = _create(client, card_number=None)

    response = client.post(f"/orders/{order['id']}/place")

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InvalidPayment"


def test_place_missing_order_returns_404(client, gateway):
    assert client.post("/orders/999/place", json={"charge": True}).status_code == 404
    assert gateway.calls == []


def test_place_order_with_charge(client, gateway):
    _stock(client, 1, 5)
    order = _create(client)

    response = client.post(f"/orders/{order['id']}/place", json={"charge": True})

    assert response.status_code == 200
    assert gateway.calls == [("4111111111111111", Decimal("25.00"))]


def test_declined_charge_returns_402(client, gateway):
    gateway.approve = False
    _stock(client, 1, 5)
    order = _create(client)

    response = client.post(f"/orders/{order['id']}/place", json={"charge": True})

    assert response.status_code == 402
    assert client.get(f"/orders/{order['id']}").json()["status"] == "PENDING"


def test_gateway_outage_returns_503(client, gateway):
    gateway.error = httpx.ConnectError("connection refused")
    _stock(client, 1, 5)
    order = _create(client)

    assert client.post(f"/orders/{order['id']}/place", json={"charge": True}).status_code == 503


def test_unsupported_payment_method_returns_400(client):
    _stock(client, 1, 5)
    order = _create(client)
    client.put(f"/orders/{order['id']}/payment-details", json={"payment_method": "CASH", "card_number": "4111"})

    response = client.post(f"/orders/{order['id']}/place", json={"charge": True})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "UnsupportedPaymentMethod"
    assert client.get(f"/orders/{order['id']}").json()["status"] == "PENDING"


def test_charge_without_payment_details_reports_invalid_payment(client, gateway):
    _stock(client, 1, 5)
    order = _create(client, card_number=None)

    response = client.post(f"/orders/{order['id']}/place", json={"charge": True})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InvalidPayment"
    assert gateway.calls == []


def test_charge_reports_inventory_shortage_before_payment_method(client, gateway):
    _stock(client, 2, 3)
    order = _create(client, items=[(2, 10)])
    client.put(f"/orders/{order['id']}/payment-details", json={"payment_method": "CASH", "card_number": "4111"})

    response = client.post(f"/orders/{order['id']}/place", json={"charge": True})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InsufficientInventory"
    assert gateway.calls == []


def test_placed_order_cannot_be_placed_again(client):
    _stock(client, 1, 5)
    order = _create(client)
    client.post(f"/orders/{order['id']}/place")

    assert client.post(f"/orders/{order['id']}/place").status_code == 409


def test_placed_order_is_not_charged_twice(client, gateway):
    _stock(client, 1, 5)
    order = _create(client)
    client.post(f"/orders/{order['id']}/place", json={"charge": True})
    client.put(f"/orders/{order['id']}/payment-details", json={"payment_method": "CASH", "card_number": "4111"})

    response = client.post(f"/orders/{order['id']}/place", json={"charge": True})

    assert response.status_code == 409
    assert len(gateway.calls) == 1


def test_update_status_and_reset(client):
    order = _create(client)

    cancelled = client.put(f"/orders/{order['id']}", json={"status": "CANCELLED"})
    assert cancelled.json()["status"] == "CANCELLED"

    assert client.put(f"/orders/{order['id']}", json={"status": "PENDING"}).status_code == 409

    reset = client.post(f"/orders/{order['id']}/reset")
    assert reset.json()["status"] == "PENDING"

    timeline = client.get(f"/orders/{order['id']}/timeline").json()
    assert [event["event_type"] for event in timeline] == ["created", "status_changed", "status_changed"]


def test_replace_payment_details_then_place(client):
    _stock(client, 1, 5)
    order = _create(client, card_number=None)

    response = client.put(
        f"/orders/{order['id']}/payment-details",
        json={"payment_method": "CREDIT_CARD", "card_number": "5555444433331111"},
    )
    assert response.json()["payment_details"]["card_number"].endswith("1111")

    assert client.post(f"/orders/{order['id']}/place").json()["status"] == "PLACED"


def test_delete_order(client):
    order = _create(client)

    assert client.delete(f"/orders/{order['id']}").status_code == 204
    assert client.get(f"/orders/{order['id']}").status_code == 404
    assert client.delete(f"/orders/{order['id']}").status_code == 404


def test_inventory_endpoints(client):
    _stock(client, 1, 5)

    assert client.post("/inventory", json={"product_id": 1, "available_quantity": 1}).status_code == 400
    assert client.put("/inventory/1", json={"available_quantity": 8}).json()["available_quantity"] == 8
    assert client.get("/inventory/1").json()["available_quantity"] == 8
    assert client.get("/inventory/2").status_code == 404
    assert client.post("/inventory", json={"product_id": 3, "available_quantity": -1}).status_code == 422


def test_non_admin_cannot_change_inventory(client):
    app.dependency_overrides[auth.get_current_user] = lambda: auth.CurrentUser(
        id=8, email="user@example.com", role="user"
    )

    assert client.post("/inventory", json={"product_id": 1, "available_quantity": 5}).status_code == 403
    assert client.get("/inventory").status_code == 200


def test_bearer_token_is_required(client):
    del app.dependency_overrides[auth.get_current_user]

    assert client.get("/orders").status_code in (401, 403)
    assert client.get("/orders", headers={"Authorization": "Bearer not-a-token"}).status_code == 401

    token = jwt.encode({"sub": "7", "email": "admin@example.com", "role": "admin"}, SECRET_KEY, algorithm=ALGORITHM)
    assert client.get("/orders", headers={"Authorization": f"Bearer {token}"}).status_code == 200
