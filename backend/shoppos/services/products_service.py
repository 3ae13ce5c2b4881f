# backend/shoppos/services/products_service.py
"""
Products Service

Plain CRUD over the products table. Stock set here is the starting or
corrected on-hand count; sales decrement it only through sales_service.
"""
from __future__ import annotations

from ..errors import ConflictError, NotFoundError
from ..extensions import db
from ..models import Product, SaleItem
from .concurrency import run_with_retry

PRODUCT_MUTABLE_FIELDS = {"name", "price_cents", "stock_quantity", "category"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(category: str | None = None) -> list[dict]:
    query = db.session.query(Product)
    if category:
        query = query.filter(Product.category == category)
    products = query.order_by(Product.name.asc(), Product.id.asc()).all()
    return [p.to_dict() for p in products]


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    return product


def create_product(*, patch: dict) -> dict:
    """Create product using a validated patch dict."""
    p = Product(stock_quantity=0, category="Other")
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict:
    """
    Apply a validated partial update.

    version_id makes a concurrent checkout and an edit of the same row
    conflict instead of one silently overwriting the other's stock; the edit
    is retried against the fresh row.
    """
    def _op():
        p = get_product(product_id)
        apply_product_patch(p, patch)
        db.session.commit()
        return p.to_dict()

    return run_with_retry(_op)


def delete_product(*, product_id: int) -> None:
    """
    Delete a product that no sale references.

    Sale history keeps its line items, so a product that has been sold is
    refused with ConflictError; change its stock to 0 instead.
    """
    p = get_product(product_id)

    sold = db.session.query(SaleItem.id).filter(SaleItem.product_id == product_id).first()
    if sold:
        raise ConflictError(
            "Product has sales history and cannot be deleted",
            details={"product_id": product_id},
        )

    db.session.delete(p)
    db.session.commit()
