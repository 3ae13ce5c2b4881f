from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError, ConflictError  # noqa: F401  (re-exported for routes)
from .money import MAX_PRICE_CENTS, to_cents
from .models import DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS

MAX_PAYMENT_METHOD_LENGTH = 32
MAX_CART_LINES = 200


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(value: Any, field: str) -> int:
    """Strict integer coercion: rejects bools, floats, decimals and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(value, col.key)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def normalize_product_payload(payload: Any) -> dict:
    """
    Accept the decimal "price" the register UI sends and store it as price_cents.
    Sending both is ambiguous and rejected.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(payload)
    if "price" in payload:
        if "price_cents" in payload:
            raise ValidationError("Send either price or price_cents, not both")
        raw = payload.pop("price")
        payload["price_cents"] = None if raw is None else to_cents(raw, "price")
    return payload


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "price_cents" in patch and patch["price_cents"] is not None:
        price = patch["price_cents"]
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"price cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")

    if "stock_quantity" in patch and patch["stock_quantity"] is not None:
        if patch["stock_quantity"] < 0:
            raise ValidationError("stock_quantity must be >= 0")


# =============================================================================
# SALE REQUEST
# =============================================================================


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class SaleRequest:
    """A validated checkout request. Lines keep their submission order."""
    lines: tuple[CartLine, ...]
    payment_method: str = DEFAULT_PAYMENT_METHOD


def _parse_cart_line(index: int, raw: Any) -> CartLine:
    if not isinstance(raw, dict):
        raise ValidationError(f"items[{index}] must be an object")

    # The register UI posts camelCase productId
    product_id = raw.get("product_id", raw.get("productId"))
    if product_id is None:
        raise ValidationError(f"items[{index}].product_id is required")
    product_id = coerce_int(product_id, f"items[{index}].product_id")
    if product_id <= 0:
        raise ValidationError(f"items[{index}].product_id must be a positive integer")

    if raw.get("quantity") is None:
        raise ValidationError(f"items[{index}].quantity is required")
    quantity = coerce_int(raw["quantity"], f"items[{index}].quantity")
    if quantity <= 0:
        raise ValidationError(f"items[{index}].quantity must be a positive integer")

    return CartLine(product_id=product_id, quantity=quantity)


def parse_payment_method(raw: Any) -> str:
    """
    Known methods are matched case-insensitively and returned in canonical
    form. Unknown labels are accepted as-is; only the shape is checked.
    Missing, null or blank falls back to the default.
    """
    if raw is None:
        return DEFAULT_PAYMENT_METHOD
    if not isinstance(raw, str):
        raise ValidationError("payment_method must be a string")
    method = raw.strip()
    if not method:
        return DEFAULT_PAYMENT_METHOD
    if len(method) > MAX_PAYMENT_METHOD_LENGTH:
        raise ValidationError(f"payment_method exceeds max length {MAX_PAYMENT_METHOD_LENGTH}")
    for known in PAYMENT_METHODS:
        if method.lower() == known.lower():
            return known
    return method


def parse_sale_request(payload: Any) -> SaleRequest:
    """Validate a checkout payload before any unit of work is opened."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    items = payload.get("items")
    if not items:
        raise ValidationError("Sale must have at least one item")
    if not isinstance(items, list):
        raise ValidationError("items must be a list")
    if len(items) > MAX_CART_LINES:
        raise ValidationError(f"Sale cannot have more than {MAX_CART_LINES} items")

    lines = tuple(_parse_cart_line(i, raw) for i, raw in enumerate(items))

    return SaleRequest(
        lines=lines,
        payment_method=parse_payment_method(payload.get("payment_method")),
    )
