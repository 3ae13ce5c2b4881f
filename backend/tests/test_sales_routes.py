"""
Sales API tests.

Verifies the HTTP contract of POST/GET /api/sales: payload shape, status
codes per error kind, and ownership filtering of history.
"""

import pytest

from shoppos.errors import StorageError
from shoppos.models import Product, Sale
from shoppos.services.concurrency import UnitOfWork

from conftest import fresh


class TestCreateSaleRoute:
    def test_end_to_end(self, client, db_session, milk, cashier_user, cashier_headers):
        resp = client.post(
            "/api/sales",
            json={"items": [{"productId": milk.id, "quantity": 3}], "payment_method": "Card"},
            headers=cashier_headers,
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["sale"]["total_amount"] == "4.50"
        assert body["sale"]["payment_method"] == "Card"
        assert body["sale"]["user_id"] == cashier_user.id
        assert body["sale"]["date"].endswith("Z")
        assert body["items"] == [{
            "id": body["items"][0]["id"],
            "sale_id": body["sale"]["id"],
            "product_id": milk.id,
            "quantity": 3,
            "price": "1.50",
            "price_cents": 150,
            "line_total": "4.50",
        }]
        assert fresh(db_session, Product, milk.id).stock_quantity == 7

    def test_payment_method_defaults_to_cash(self, client, db_session, milk, cashier_headers):
        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": milk.id, "quantity": 1}]},
            headers=cashier_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["sale"]["payment_method"] == "Cash"

    @pytest.mark.parametrize("payload", [
        {},
        {"items": []},
        {"items": [{"product_id": 1, "quantity": 0}]},
        {"items": [{"product_id": 1, "quantity": -2}]},
        {"items": [{"product_id": 1, "quantity": 1.5}]},
        {"items": [{"quantity": 1}]},
        {"items": [{"product_id": 1, "quantity": 1}], "payment_method": 7},
    ])
    def test_invalid_payload_is_400(self, client, db_session, milk, cashier_headers, payload):
        resp = client.post("/api/sales", json=payload, headers=cashier_headers)

        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert db_session.query(Sale).count() == 0

    def test_unknown_product_is_404(self, client, db_session, milk, cashier_headers):
        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": milk.id, "quantity": 1}, {"product_id": 777, "quantity": 1}]},
            headers=cashier_headers,
        )

        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Product with ID 777 not found"
        assert fresh(db_session, Product, milk.id).stock_quantity == 10

    def test_insufficient_stock_is_409(self, client, db_session, bread, cashier_headers):
        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": bread.id, "quantity": 6}]},
            headers=cashier_headers,
        )

        assert resp.status_code == 409
        body = resp.get_json()
        assert body["error"] == "Insufficient stock for Bread. Available: 5"
        assert body["details"]["available"] == 5
        assert fresh(db_session, Product, bread.id).stock_quantity == 5

    def test_storage_failure_is_generic_500(self, client, db_session, milk, cashier_headers, monkeypatch):
        def failing_commit(self):
            raise StorageError("Storage failure")

        monkeypatch.setattr(UnitOfWork, "commit", failing_commit)

        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": milk.id, "quantity": 2}]},
            headers=cashier_headers,
        )

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Sale could not be recorded, please retry"}
        assert fresh(db_session, Product, milk.id).stock_quantity == 10
        assert db_session.query(Sale).count() == 0

    def test_requires_auth(self, client, db_session, milk):
        resp = client.post("/api/sales", json={"items": [{"product_id": milk.id, "quantity": 1}]})
        assert resp.status_code == 401


class TestSaleHistoryRoutes:
    def _sell(self, client, headers, product_id, qty=1):
        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": product_id, "quantity": qty}]},
            headers=headers,
        )
        assert resp.status_code == 201
        return resp.get_json()["sale"]["id"]

    def test_list_is_filtered_for_cashiers(
        self, client, db_session, milk, admin_headers, cashier_headers, other_cashier_headers
    ):
        mine = self._sell(client, cashier_headers, milk.id)
        theirs = self._sell(client, other_cashier_headers, milk.id)

        resp = client.get("/api/sales", headers=cashier_headers)
        assert resp.status_code == 200
        assert [s["id"] for s in resp.get_json()["items"]] == [mine]

        resp = client.get("/api/sales", headers=admin_headers)
        assert [s["id"] for s in resp.get_json()["items"]] == [theirs, mine]

    def test_detail_includes_items_and_product(self, client, db_session, milk, bread, cashier_headers):
        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": milk.id, "quantity": 2}, {"product_id": bread.id, "quantity": 1}]},
            headers=cashier_headers,
        )
        sale_id = resp.get_json()["sale"]["id"]

        resp = client.get(f"/api/sales/{sale_id}", headers=cashier_headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["sale"]["total_amount"] == "5.25"
        assert [i["product"]["name"] for i in body["items"]] == ["Milk", "Bread"]
        assert [i["price"] for i in body["items"]] == ["1.50", "2.25"]

    def test_detail_of_other_cashiers_sale_is_404(
        self, client, db_session, milk, cashier_headers, other_cashier_headers, admin_headers
    ):
        theirs = self._sell(client, other_cashier_headers, milk.id)

        assert client.get(f"/api/sales/{theirs}", headers=cashier_headers).status_code == 404
        assert client.get(f"/api/sales/{theirs}", headers=admin_headers).status_code == 200

    def test_missing_sale_is_404(self, client, db_session, admin_headers):
        assert client.get("/api/sales/12345", headers=admin_headers).status_code == 404

    def test_summary(self, client, db_session, milk, cashier_headers):
        self._sell(client, cashier_headers, milk.id, qty=2)
        self._sell(client, cashier_headers, milk.id, qty=1)

        resp = client.get("/api/sales/summary", headers=cashier_headers)

        assert resp.status_code == 200
        assert resp.get_json() == {"count": 2, "total_amount_cents": 450, "total_amount": "4.50"}
