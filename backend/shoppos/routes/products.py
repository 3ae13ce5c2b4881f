# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/shoppos/routes/products.py
"""
Product management routes.

SECURITY: All routes require authentication.
- Read operations require VIEW_PRODUCTS permission
- Write operations require MANAGE_PRODUCTS permission (admin)
"""
from flask import Blueprint, request

from ..errors import AppError
from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    normalize_product_payload,
    enforce_rules_product,
    ValidationError,
)
from ..decorators import require_auth, require_permission

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "stock_quantity", "category"},
    required_on_create={"name", "price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _validated_patch(partial: bool) -> dict:
    payload = normalize_product_payload(request.get_json(silent=True) or {})
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)
    return patch


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    """
    List all products ordered by name.

    Query params:
    - category: str (optional) - exact category filter
    """
    items = products_service.list_products(category=request.args.get("category"))
    return {"items": items, "count": len(items)}


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_PRODUCTS")
def get_product_route(product_id: int):
    try:
        return products_service.get_product(product_id).to_dict()
    except AppError as e:
        return e.to_dict(), e.status_code


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """
    Create a new product.

    Body: {"name": "Milk", "price": "1.50", "stock_quantity": 10, "category": "Dairy"}
    """
    try:
        patch = _validated_patch(partial=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return products_service.create_product(patch=patch), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: int):
    """Partially update a product."""
    try:
        patch = _validated_patch(partial=True)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        return products_service.update_product(product_id=product_id, patch=patch), 200
    except AppError as e:
        return e.to_dict(), e.status_code


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: int):
    """Delete a product that has never been sold."""
    try:
        products_service.delete_product(product_id=product_id)
    except AppError as e:
        return e.to_dict(), e.status_code

    return {"ok": True}, 200
