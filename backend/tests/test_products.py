"""
Product API tests.

Verifies CRUD, admin-only writes, money validation and the delete guard
for products that appear in sale history.
"""

import pytest

from shoppos.models import Product
from shoppos.services import sales_service
from shoppos.validation import CartLine, SaleRequest

from conftest import fresh


class TestProductReads:
    def test_list_ordered_by_name(self, client, db_session, milk, bread, cashier_headers):
        resp = client.get("/api/products", headers=cashier_headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 2
        assert [p["name"] for p in body["items"]] == ["Bread", "Milk"]
        assert body["items"][1]["price"] == "1.50"
        assert body["items"][1]["price_cents"] == 150

    def test_category_filter(self, client, db_session, milk, bread, cashier_headers):
        resp = client.get("/api/products?category=Dairy", headers=cashier_headers)
        assert [p["name"] for p in resp.get_json()["items"]] == ["Milk"]

    def test_get_one(self, client, db_session, bread, cashier_headers):
        resp = client.get(f"/api/products/{bread.id}", headers=cashier_headers)

        assert resp.status_code == 200
        assert resp.get_json()["stock_quantity"] == 5

    def test_get_missing_is_404(self, client, db_session, cashier_headers):
        resp = client.get("/api/products/404", headers=cashier_headers)
        assert resp.status_code == 404

    def test_requires_auth(self, client, db_session, milk):
        assert client.get("/api/products").status_code == 401


class TestProductWrites:
    def test_admin_creates_product(self, client, db_session, admin_headers):
        resp = client.post(
            "/api/products",
            json={"name": "Cheese", "price": "4.99", "stock_quantity": 12, "category": "Dairy"},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["price_cents"] == 499
        assert body["price"] == "4.99"
        assert body["stock_quantity"] == 12
        assert fresh(db_session, Product, body["id"]).name == "Cheese"

    def test_defaults_for_optional_fields(self, client, db_session, admin_headers):
        resp = client.post("/api/products", json={"name": "Gum", "price": 1}, headers=admin_headers)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["stock_quantity"] == 0
        assert body["category"] == "Other"
        assert body["price"] == "1.00"

    def test_cashier_cannot_write(self, client, db_session, milk, cashier_headers):
        resp = client.post("/api/products", json={"name": "X", "price": "1.00"}, headers=cashier_headers)
        assert resp.status_code == 403
        assert resp.get_json()["required_permission"] == "MANAGE_PRODUCTS"

        assert client.put(
            f"/api/products/{milk.id}", json={"stock_quantity": 99}, headers=cashier_headers
        ).status_code == 403
        assert client.delete(f"/api/products/{milk.id}", headers=cashier_headers).status_code == 403
        assert fresh(db_session, Product, milk.id).stock_quantity == 10

    @pytest.mark.parametrize("payload", [
        {"price": "1.00"},
        {"name": "X"},
        {"name": "", "price": "1.00"},
        {"name": "X", "price": "1.999"},
        {"name": "X", "price": "-1.00"},
        {"name": "X", "price": "1e3"},
        {"name": "X", "price": True},
        {"name": "X", "price": "1.00", "price_cents": 100},
        {"name": "X", "price": "1.00", "stock_quantity": -1},
        {"name": "X", "price": "1.00", "stock_quantity": 2.5},
        {"name": "X", "price": "1.00", "version_id": 3},
    ])
    def test_invalid_create_is_400(self, client, db_session, admin_headers, payload):
        resp = client.post("/api/products", json=payload, headers=admin_headers)

        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert db_session.query(Product).count() == 0

    def test_partial_update(self, client, db_session, milk, admin_headers):
        resp = client.put(
            f"/api/products/{milk.id}",
            json={"price": "1.75", "stock_quantity": 40},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["price"] == "1.75"
        assert body["stock_quantity"] == 40
        assert body["name"] == "Milk"
        assert body["version_id"] == 2

    def test_update_missing_is_404(self, client, db_session, admin_headers):
        resp = client.put("/api/products/999", json={"stock_quantity": 1}, headers=admin_headers)
        assert resp.status_code == 404

    def test_delete_unsold_product(self, client, db_session, milk, admin_headers):
        resp = client.delete(f"/api/products/{milk.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.get_json() == {"ok": True}
        assert fresh(db_session, Product, milk.id) is None

    def test_delete_sold_product_is_409(self, client, db_session, milk, admin_headers):
        sales_service.create_sale(SaleRequest(lines=(CartLine(milk.id, 1),)))

        resp = client.delete(f"/api/products/{milk.id}", headers=admin_headers)

        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Product has sales history and cannot be deleted"
        assert fresh(db_session, Product, milk.id) is not None
