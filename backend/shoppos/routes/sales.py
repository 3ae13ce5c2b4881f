# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/shoppos/routes/sales.py
"""Sales API routes with permission enforcement"""

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import AppError, StorageError
from ..services import sales_service
from ..validation import parse_sale_request, ValidationError
from ..decorators import require_auth, require_permission


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
@require_permission("CREATE_SALE")
def create_sale_route():
    """
    Check out a cart.

    Body: {"items": [{"product_id": 1, "quantity": 2}, ...], "payment_method": "Card"}

    Requires: CREATE_SALE permission
    Available to: admin, cashier
    """
    try:
        sale_request = parse_sale_request(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    try:
        sale, items = sales_service.create_sale(sale_request, user_id=g.current_user.id)
    except StorageError:
        current_app.logger.exception("Sale transaction failed in storage")
        return jsonify({"error": "Sale could not be recorded, please retry"}), 500
    except AppError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "sale": sale.to_dict(),
        "items": [item.to_dict() for item in items],
    }), 201


@sales_bp.get("")
@require_auth
@require_permission("VIEW_SALES")
def list_sales_route():
    """
    List sales, most recent first.

    Requires: VIEW_SALES permission
    """
    sales = sales_service.list_sales(g.current_user)
    return jsonify({
        "items": [sale.to_dict() for sale in sales],
        "count": len(sales),
    }), 200


@sales_bp.get("/summary")
@require_auth
@require_permission("VIEW_SALES")
def sales_summary_route():
    """Count and revenue over the sales visible to the caller."""
    return jsonify(sales_service.summarize_sales(g.current_user)), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_permission("VIEW_SALES")
def get_sale_route(sale_id: int):
    """
    Get sale with its items and each item's product.

    Requires: VIEW_SALES permission
    """
    try:
        sale = sales_service.get_sale(sale_id, g.current_user)
    except AppError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({
        "sale": sale.to_dict(),
        "items": [item.to_dict(include_product=True) for item in sale.items],
    }), 200
