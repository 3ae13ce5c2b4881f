from __future__ import annotations

from ..extensions import db
from ..money import format_cents
from ..time_utils import to_utc_z

DEFAULT_PAYMENT_METHOD = "Cash"

# Values offered by the register UI. Anything else is stored as an opaque label.
PAYMENT_METHODS = ("Cash", "Card", "Mobile")


class Sale(db.Model):
    """
    Sale header. Written once, together with its items, and never updated.

    total_amount_cents always equals the sum of price_cents * quantity over
    its items at creation time.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("total_amount_cents >= 0", name="ck_sales_total_non_negative"),
        db.Index("ix_sales_user_date", "user_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    total_amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default=DEFAULT_PAYMENT_METHOD)

    # Nullable: sales recorded before cashier attribution existed have no owner
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    items = db.relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
        lazy=True,
    )
    user = db.relationship("User", backref=db.backref("sales", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "total_amount": format_cents(self.total_amount_cents),
            "total_amount_cents": self.total_amount_cents,
            "payment_method": self.payment_method,
            "user_id": self.user_id,
        }


class SaleItem(db.Model):
    """Line item on a sale. price_cents is the unit price captured at sale time."""
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)

    sale = db.relationship("Sale", back_populates="items")
    product = db.relationship("Product")

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.quantity

    def to_dict(self, include_product: bool = False) -> dict:
        data = {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": format_cents(self.price_cents),
            "price_cents": self.price_cents,
            "line_total": format_cents(self.line_total_cents),
        }
        if include_product:
            data["product"] = self.product.to_dict() if self.product else None
        return data
