"""
HTTP contract: routes, camelCase payloads and error mapping.
"""
import pytest
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.crud.ledger import crud_ledger
from app.exceptions import LedgerImmutableError
from app.models import LedgerEntry, Order, OrderItem
from app.security import hash_pin, verify_pin


@pytest.fixture
def product(client):
    def _create(name="Coxinha", price=5.5, unit="un", stock=0):
        resp = client.post("/api/products", json={"name": name, "unit": unit, "price": price})
        assert resp.status_code == 201, resp.text
        body = resp.json()
        if stock:
            resp = client.post("/api/stock/in", json={"productId": body["id"], "quantity": stock})
            assert resp.status_code == 200, resp.text
        return body
    return _create


def stock_of(client, product_id):
    resp = client.get(f"/api/stock/{product_id}")
    assert resp.status_code == 200
    return resp.json()["currentStock"]


# ====================
# PRODUCTS
# ====================

class TestProducts:
    def test_crud(self, client, product):
        created = product("Kibe", price=4.25, unit="un")
        assert Decimal(created["price"]) == Decimal("4.25")
        assert {"id", "name", "unit", "price", "createdAt", "updatedAt"} <= created.keys()

        resp = client.patch(f"/api/products/{created['id']}", json={"price": 4.75})
        assert resp.status_code == 200
        assert Decimal(resp.json()["price"]) == Decimal("4.75")
        assert resp.json()["name"] == "Kibe"

        assert client.get(f"/api/products/{created['id']}").json()["unit"] == "un"
        assert [p["name"] for p in client.get("/api/products").json()] == ["Kibe"]

        assert client.delete(f"/api/products/{created['id']}").status_code == 200
        assert client.get(f"/api/products/{created['id']}").status_code == 404

    def test_list_is_sorted_by_name(self, client, product):
        product("Pastel")
        product("Coxinha")
        assert [p["name"] for p in client.get("/api/products").json()] == ["Coxinha", "Pastel"]

    def test_missing_product(self, client):
        assert client.get("/api/products/99").status_code == 404
        assert client.patch("/api/products/99", json={"name": "x"}).status_code == 404
        assert client.delete("/api/products/99").status_code == 404

    def test_invalid_price_is_rejected(self, client):
        resp = client.post("/api/products", json={"name": "Kibe", "unit": "un", "price": 0})
        assert resp.status_code == 422

    def test_product_with_history_cannot_be_deleted(self, client, product):
        created = product(stock=5)
        resp = client.delete(f"/api/products/{created['id']}")
        assert resp.status_code == 409
        assert "cannot be deleted" in resp.json()["detail"]


# ====================
# STOCK
# ====================

class TestStock:
    def test_stock_in_and_adjust(self, client, product):
        created = product()
        resp = client.post("/api/stock/in", json={"productId": created["id"], "quantity": 10})
        assert resp.json() == {"success": True}
        resp = client.post("/api/stock/adjust", json={"productId": created["id"], "quantity": -4})
        assert resp.json() == {"success": True}

        assert stock_of(client, created["id"]) == 6

    def test_stock_in_requires_positive_quantity(self, client, product):
        created = product()
        resp = client.post("/api/stock/in", json={"productId": created["id"], "quantity": 0})
        assert resp.status_code == 422

    def test_adjustment_must_not_be_zero(self, client, product):
        created = product()
        resp = client.post("/api/stock/adjust", json={"productId": created["id"], "quantity": 0})
        assert resp.status_code == 422

    def test_unknown_product(self, client):
        resp = client.post("/api/stock/in", json={"productId": 404, "quantity": 1})
        assert resp.status_code == 404
        assert client.get("/api/stock/404").status_code == 404

    def test_snapshot(self, client, product):
        kibe = product("Kibe", stock=3)
        coxinha = product("Coxinha")
        client.post("/api/stock/adjust", json={"productId": coxinha["id"], "quantity": -2})

        rows = client.get("/api/stock/snapshot").json()

        assert rows == [
            {"productId": coxinha["id"], "productName": "Coxinha", "currentStock": -2,
             "warnings": ["Negative stock: -2"]},
            {"productId": kibe["id"], "productName": "Kibe", "currentStock": 3, "warnings": None},
        ]

    def test_ledger_history(self, client, product):
        created = product(stock=5)
        client.post("/api/stock/adjust", json={"productId": created["id"], "quantity": -1})

        entries = client.get(f"/api/stock/{created['id']}/ledger").json()

        assert [(e["type"], e["quantity"]) for e in entries] == [
            ("STOCK_ADJUSTMENT", -1),
            ("STOCK_IN", 5),
        ]


# ====================
# ORDERS
# ====================

class TestOrders:
    def test_create_returns_camel_case_order(self, client, product):
        coxinha = product(price=5.5, stock=10)

        resp = client.post("/api/orders", json={
            "deliveryFee": 3,
            "items": [{"productId": coxinha["id"], "quantity": 2}],
        })

        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["status"] == "DRAFT"
        assert Decimal(body["totalPrice"]) == Decimal("11.00")
        assert Decimal(body["deliveryFee"]) == Decimal("3.00")
        assert body["warnings"] is None
        assert body["customerId"] is None
        item = body["items"][0]
        assert (item["productId"], item["quantity"]) == (coxinha["id"], 2)
        assert Decimal(item["unitPrice"]) == Decimal("5.50")
        assert item["product"]["name"] == "Coxinha"
        assert stock_of(client, coxinha["id"]) == 8

    def test_create_with_customer(self, client, product):
        customer = client.post("/api/customers", json={"name": "Maria", "contact": "555"}).json()
        coxinha = product(stock=1)

        body = client.post("/api/orders", json={
            "customerId": customer["id"],
            "items": [{"productId": coxinha["id"], "quantity": 1}],
        }).json()

        assert body["customerId"] == customer["id"]
        assert body["customer"]["name"] == "Maria"

    def test_shortfall_is_a_warning(self, client, product):
        coxinha = product("Coxinha", stock=2)

        resp = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 5}]})

        assert resp.status_code == 201
        warnings = resp.json()["warnings"]
        assert len(warnings) == 1 and "-3" in warnings[0]
        assert stock_of(client, coxinha["id"]) == -3

    def test_validation(self, client, product):
        coxinha = product()
        assert client.post("/api/orders", json={"items": []}).status_code == 422
        assert client.post(
            "/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 0}]}
        ).status_code == 422
        assert client.post("/api/orders", json={}).status_code == 422

    def test_unknown_product_is_404(self, client):
        resp = client.post("/api/orders", json={"items": [{"productId": 77, "quantity": 1}]})
        assert resp.status_code == 404
        assert "77" in resp.json()["detail"]

    def test_get_and_list(self, client, product):
        coxinha = product(stock=10)
        order = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 1}]}).json()

        assert client.get(f"/api/orders/{order['id']}").json()["id"] == order["id"]
        assert client.get("/api/orders/999").status_code == 404
        assert [o["id"] for o in client.get("/api/orders").json()] == [order["id"]]
        assert client.get("/api/orders", params={"status": "COMPLETED"}).json() == []
        assert client.get("/api/orders", params={"date": "2000-01-01"}).json() == []
        assert client.get("/api/orders", params={"status": "NOPE"}).status_code == 422

    def test_update_items_and_status(self, client, product):
        coxinha = product(price=2, stock=10)
        order = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 1}]}).json()

        resp = client.patch(f"/api/orders/{order['id']}", json={
            "items": [{"productId": coxinha["id"], "quantity": 4}],
            "status": "PENDING",
        })

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["status"] == "PENDING"
        assert Decimal(body["totalPrice"]) == Decimal("8.00")
        assert [i["quantity"] for i in body["items"]] == [4]
        assert stock_of(client, coxinha["id"]) == 6

    def test_skipping_a_status_is_400(self, client, product):
        coxinha = product(stock=10)
        order = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 1}]}).json()

        resp = client.patch(f"/api/orders/{order['id']}", json={"status": "READY"})

        assert resp.status_code == 400
        assert "DRAFT" in resp.json()["detail"]

    def test_complete_then_everything_else_is_400(self, client, product):
        coxinha = product(stock=10)
        order = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 3}]}).json()

        resp = client.post(f"/api/orders/{order['id']}/complete")
        assert resp.status_code == 200
        assert resp.json()["status"] == "COMPLETED"
        assert stock_of(client, coxinha["id"]) == 7

        assert client.post(f"/api/orders/{order['id']}/complete").status_code == 400
        assert client.post(f"/api/orders/{order['id']}/cancel").status_code == 400
        assert client.patch(f"/api/orders/{order['id']}", json={"deliveryFee": 1}).status_code == 400
        assert stock_of(client, coxinha["id"]) == 7

    def test_cancel(self, client, product):
        coxinha = product(stock=10)
        order = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 3}]}).json()

        resp = client.post(f"/api/orders/{order['id']}/cancel")

        assert resp.status_code == 200
        assert resp.json()["status"] == "CANCELLED"
        assert stock_of(client, coxinha["id"]) == 10
        assert client.post(f"/api/orders/{order['id']}/cancel").status_code == 400
        assert client.post(f"/api/orders/{order['id']}/complete").status_code == 400

    def test_completed_endpoint_defaults_to_today(self, client, product):
        coxinha = product(stock=10)
        done = client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 1}]}).json()
        client.post("/api/orders", json={"items": [{"productId": coxinha["id"], "quantity": 1}]})
        client.post(f"/api/orders/{done['id']}/complete")

        assert [o["id"] for o in client.get("/api/orders/completed").json()] == [done["id"]]
        assert client.get("/api/orders/completed", params={"date": "2000-01-01"}).json() == []


# ====================
# PIN GATE
# ====================

class TestPin:
    @pytest.fixture(autouse=True)
    def pin(self, monkeypatch):
        monkeypatch.setattr(settings, "PIN_CODE", "1234")
        monkeypatch.setattr(settings, "PIN_CODE_HASH", None)

    def test_verify_pin(self, client):
        assert client.post("/api/auth/verify-pin", json={"pin": "1234"}).json() == {"success": True}

        resp = client.post("/api/auth/verify-pin", json={"pin": "9999"})
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Invalid PIN"}

    def test_hashed_pin_wins(self, monkeypatch):
        monkeypatch.setattr(settings, "PIN_CODE_HASH", hash_pin("4321"))
        assert verify_pin("4321")
        assert not verify_pin("1234")

    def test_header_gate_is_off_by_default(self, client):
        assert client.get("/api/products").status_code == 200

    def test_header_gate(self, client, monkeypatch):
        monkeypatch.setattr(settings, "REQUIRE_PIN_HEADER", True)

        assert client.get("/api/products").status_code == 401
        assert client.get("/api/products", headers={"X-PIN": "0000"}).status_code == 401
        assert client.get("/api/products", headers={"X-PIN": "1234"}).status_code == 200
        # the PIN check itself stays reachable
        assert client.post("/api/auth/verify-pin", json={"pin": "1234"}).status_code == 200


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


# ====================
# SERVER ERRORS
# ====================

class TestServerErrors:
    def test_database_failure_midway_rolls_back_whole_order(self, client, product, db, monkeypatch):
        coxinha = product("Coxinha", stock=10)
        kibe = product("Kibe", stock=10)
        reserve = crud_ledger.reserve
        calls = []

        def reserve_then_fail(db, **kwargs):
            calls.append(kwargs["product_id"])
            if len(calls) == 2:
                raise SQLAlchemyError("disk I/O error")
            return reserve(db, **kwargs)

        monkeypatch.setattr(crud_ledger, "reserve", reserve_then_fail)

        resp = client.post("/api/orders", json={"items": [
            {"productId": coxinha["id"], "quantity": 2},
            {"productId": kibe["id"], "quantity": 3},
        ]})

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}
        assert calls == [coxinha["id"], kibe["id"]]
        assert db.execute(select(func.count()).select_from(Order)).scalar_one() == 0
        assert db.execute(select(func.count()).select_from(OrderItem)).scalar_one() == 0
        assert db.execute(select(func.count()).select_from(LedgerEntry)).scalar_one() == 2
        assert stock_of(client, coxinha["id"]) == 10
        assert stock_of(client, kibe["id"]) == 10

    def test_ledger_refusal_is_reported_as_internal_error(self, client, product, monkeypatch):
        coxinha = product(stock=4)

        def refuse(db, **kwargs):
            raise LedgerImmutableError()

        monkeypatch.setattr(crud_ledger, "record_stock_in", refuse)

        resp = client.post("/api/stock/in", json={"productId": coxinha["id"], "quantity": 1})

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}
        assert stock_of(client, coxinha["id"]) == 4
