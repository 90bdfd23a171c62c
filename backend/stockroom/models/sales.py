from __future__ import annotations

from ..extensions import db
from stockroom.time_utils import to_utc_z, utcnow

class Sale(db.Model):
    """
    Sale transaction record (the sales ledger).

    product_name, product_image and price_cents are a point-in-time snapshot
    taken when the order was placed. product_name is a historical label, NOT a
    foreign key: deleting or renaming a product leaves its sales intact.

    date is the user-supplied transaction date; created_at/updated_at are
    system timestamps.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint(
            "total_amount_cents = price_cents * quantity",
            name="ck_sales_total_matches_lines",
        ),
        db.Index("ix_sales_product_name", "product_name"),
        db.Index("ix_sales_client_date", "client_name", "date"),
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    client_name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(32), nullable=False)

    # Snapshot of the product at order time
    product_name = db.Column(db.String(255), nullable=False)
    product_image = db.Column(db.Text, nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    total_amount_cents = db.Column(db.Integer, nullable=False)

    date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Sale id={self.id} product_name={self.product_name!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_name": self.client_name,
            "status": self.status,
            "product_name": self.product_name,
            "product_image": self.product_image,
            "quantity": self.quantity,
            "price_cents": self.price_cents,
            "total_amount_cents": self.total_amount_cents,
            "date": self.date.isoformat() if self.date else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
