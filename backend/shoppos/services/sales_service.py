"""
Sales Service - checkout transaction and sale history.

create_sale is the only place stock is taken out of the products table.
All of its reads and writes run in one UnitOfWork: either the sale, every
item and every stock decrement commit together, or none of them do.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy import func

from ..errors import AppError, NotFoundError
from ..extensions import db
from ..models import Sale, SaleItem, User
from ..money import format_cents
from ..permissions import has_permission
from ..time_utils import utcnow
from ..validation import SaleRequest
from . import inventory_service
from .concurrency import UnitOfWork


@dataclass
class StagedItem:
    product_id: int
    quantity: int
    price_cents: int

    @property
    def subtotal_cents(self) -> int:
        return self.price_cents * self.quantity


def _stage_lines(uow: UnitOfWork, request: SaleRequest) -> tuple[int, list[StagedItem]]:
    """
    Validate, price and decrement each cart line in submission order.

    Returns (total_cents, staged items). Raises on the first bad line; the
    caller's unit of work discards the decrements of the lines before it.
    """
    total_cents = 0
    staged: list[StagedItem] = []

    for line in request.lines:
        product = inventory_service.get_product(uow, line.product_id)
        if product is None:
            raise NotFoundError(
                f"Product with ID {line.product_id} not found",
                details={"product_id": line.product_id},
            )

        if product.stock_quantity < line.quantity:
            raise inventory_service.insufficient_stock(product, line.quantity)

        item = StagedItem(
            product_id=product.id,
            quantity=line.quantity,
            price_cents=product.price_cents,
        )
        total_cents += item.subtotal_cents
        staged.append(item)

        inventory_service.decrement_stock(uow, product, line.quantity)

    return total_cents, staged


def create_sale(
    request: SaleRequest,
    user_id: int | None = None,
    *,
    timeout: float | None = None,
) -> tuple[Sale, list[SaleItem]]:
    """
    Record a sale atomically.

    Raises NotFoundError (unknown product), ConflictError (insufficient stock)
    or StorageError (store failure, timeout). In every failure case no stock
    changes and no sale rows exist afterwards.
    """
    if timeout is None:
        timeout = current_app.config.get("SALE_TRANSACTION_TIMEOUT_SECONDS")

    try:
        with UnitOfWork(timeout=timeout, label="sale transaction") as uow:
            total_cents, staged = _stage_lines(uow, request)

            sale = Sale(
                date=utcnow(),
                total_amount_cents=total_cents,
                payment_method=request.payment_method,
                user_id=user_id,
            )
            uow.session.add(sale)
            uow.flush()

            items = [
                SaleItem(
                    sale=sale,
                    product_id=s.product_id,
                    quantity=s.quantity,
                    price_cents=s.price_cents,
                )
                for s in staged
            ]
            uow.session.add_all(items)
            uow.flush()

            uow.commit()
    except AppError as exc:
        current_app.logger.warning("Sale rolled back: %s", exc)
        raise

    current_app.logger.info(
        "Sale %s committed: total=%s lines=%d payment=%s",
        sale.id, format_cents(total_cents), len(items), sale.payment_method,
    )
    return sale, items


# =============================================================================
# HISTORY
# =============================================================================


def _visible_sales_query(viewer: User):
    query = db.session.query(Sale)
    if not has_permission(viewer, "VIEW_ALL_SALES"):
        # Unattributed sales (user_id NULL) never match, so only admins see them
        query = query.filter(Sale.user_id == viewer.id)
    return query


def list_sales(viewer: User) -> list[Sale]:
    """Most recent first. Cashiers only see sales they rang up."""
    return (
        _visible_sales_query(viewer)
        .order_by(Sale.date.desc(), Sale.id.desc())
        .all()
    )


def get_sale(sale_id: int, viewer: User) -> Sale:
    """
    Fetch one sale with its items.

    A sale the viewer may not see is reported as missing rather than
    forbidden, so ids of other cashiers' sales are not confirmed.
    """
    sale = _visible_sales_query(viewer).filter(Sale.id == sale_id).first()
    if sale is None:
        raise NotFoundError("Sale not found", details={"sale_id": sale_id})
    return sale


def summarize_sales(viewer: User) -> dict:
    count, total = (
        _visible_sales_query(viewer)
        .with_entities(func.count(Sale.id), func.coalesce(func.sum(Sale.total_amount_cents), 0))
        .one()
    )
    return {
        "count": count,
        "total_amount_cents": int(total),
        "total_amount": format_cents(int(total)),
    }
