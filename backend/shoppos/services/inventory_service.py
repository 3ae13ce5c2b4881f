# Overview: Inventory store operations used inside a sale unit of work.

"""
Inventory store.

Every function takes the caller's UnitOfWork so reads see the writes already
staged in it, and so the stock decrement commits or rolls back together with
the sale rows. Nothing here commits.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError
from ..models import Product
from .concurrency import UnitOfWork, lock_for_update


def get_product(uow: UnitOfWork, product_id: int) -> Product | None:
    """
    Read and lock a product inside the unit of work.

    populate_existing() forces a fresh row even if the product is already in
    the identity map, so the second occurrence of a product in one cart sees
    the decrement flushed for the first.
    """
    uow.check_deadline()
    query = lock_for_update(
        uow.session.query(Product).filter(Product.id == product_id).populate_existing()
    )
    try:
        return query.one_or_none()
    except SQLAlchemyError as exc:
        raise uow.translate_error(exc) from exc


def write_back(uow: UnitOfWork, product: Product) -> None:
    """Stage the product row in the unit of work and flush it."""
    uow.session.add(product)
    uow.flush()


def insufficient_stock(product: Product, requested: int) -> ConflictError:
    return ConflictError(
        f"Insufficient stock for {product.name}. Available: {product.stock_quantity}",
        details={
            "product_id": product.id,
            "name": product.name,
            "available": product.stock_quantity,
            "requested": requested,
        },
    )


def decrement_stock(uow: UnitOfWork, product: Product, quantity: int) -> Product:
    """Conditional decrement: refuses to take stock below zero."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    if product.stock_quantity < quantity:
        raise insufficient_stock(product, quantity)

    product.stock_quantity -= quantity
    write_back(uow, product)
    return product
