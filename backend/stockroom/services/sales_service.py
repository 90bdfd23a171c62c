"""
Sales Service - the sales ledger

A sale is a point-in-time snapshot (product name/image/price) of an order.
Edit and delete each run as one atomic read-modify-write under the store
lock: the sale row and every stock adjustment commit together or not at all.
"""

from flask import current_app

from ..extensions import db
from ..errors import InsufficientStockError, NotFoundError
from ..models import Sale, Product
from ..validation import check_line_total
from stockroom.time_utils import utcnow
from .concurrency import atomic, lock_for_update, store_access

SALE_MUTABLE_FIELDS = {"client_name", "status", "product_name", "quantity", "date"}


def find_product_by_name(name: str) -> Product | None:
    """Current catalog entry for a sale's product label, if it still exists."""
    return lock_for_update(db.session.query(Product).filter_by(name=name)).first()


def adjust_stock(product: Product, delta: int) -> None:
    """
    Apply a signed stock change, refusing to go below zero.

    Raises InsufficientStockError with the units available and the units the
    change would take out.
    """
    new_quantity = product.quantity + delta
    if new_quantity < 0:
        raise InsufficientStockError(product.name, available=product.quantity, requested=-delta)
    product.quantity = new_quantity
    product.updated_at = utcnow()


def _get_sale_locked(sale_id: int) -> Sale:
    sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
    if not sale:
        raise NotFoundError("Sale not found", details={"sale_id": sale_id})
    return sale


def list_sales() -> dict:
    """All sales, newest created first."""
    with store_access():
        sales = db.session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).all()
        return {
            "items": [s.to_dict() for s in sales],
            "count": len(sales),
        }


def get_sale(sale_id: int) -> dict:
    with store_access():
        sale = db.session.get(Sale, sale_id)
        if not sale:
            raise NotFoundError("Sale not found", details={"sale_id": sale_id})
        return sale.to_dict()


def update_sale(sale_id: int, patch: dict) -> dict:
    """
    Edit a sale and reconcile inventory.

    - Product changed: price/image come from the new product's current state,
      the old quantity goes back to the old product and the new quantity is
      taken from the new product.
    - Same product: stock moves by (old quantity - new quantity).

    Raises:
        NotFoundError: sale or new product missing
        InsufficientStockError: reconciliation would drive stock negative
        ValidationError: price x quantity does not fit the store's INTEGER
    """
    with atomic():
        sale = _get_sale_locked(sale_id)

        old_name = sale.product_name
        old_quantity = sale.quantity
        new_name = patch.get("product_name", old_name)
        new_quantity = patch.get("quantity", old_quantity)
        product_changed = new_name != old_name

        new_product = None
        if product_changed:
            new_product = find_product_by_name(new_name)
            if not new_product:
                raise NotFoundError(f"Product '{new_name}' not found", details={"product_name": new_name})
            price_cents, image = new_product.price_cents, new_product.image
        else:
            price_cents, image = sale.price_cents, sale.product_image
        total_amount_cents = check_line_total(price_cents, new_quantity)

        for k, v in patch.items():
            if k in SALE_MUTABLE_FIELDS:
                setattr(sale, k, v)
        sale.price_cents = price_cents
        sale.product_image = image
        sale.total_amount_cents = total_amount_cents
        sale.updated_at = utcnow()

        if product_changed:
            old_product = find_product_by_name(old_name)
            if old_product:
                adjust_stock(old_product, old_quantity)
            else:
                current_app.logger.warning("Sale %s: product %r no longer exists; nothing to restock", sale_id, old_name)
            adjust_stock(new_product, -new_quantity)
        elif new_quantity != old_quantity:
            product = find_product_by_name(new_name)
            if product:
                adjust_stock(product, old_quantity - new_quantity)
            else:
                current_app.logger.warning("Sale %s: product %r no longer exists; stock not reconciled", sale_id, new_name)

        db.session.flush()
        result = sale.to_dict()

    current_app.logger.info(
        "Updated sale id=%s product %r x%s -> %r x%s",
        sale_id, old_name, old_quantity, new_name, new_quantity,
    )
    return result


def delete_sale(sale_id: int) -> None:
    """Remove a sale and return its quantity to the product's stock."""
    with atomic():
        sale = _get_sale_locked(sale_id)

        product = find_product_by_name(sale.product_name)
        if product:
            adjust_stock(product, sale.quantity)
        else:
            current_app.logger.warning("Sale %s: product %r no longer exists; nothing to restock", sale_id, sale.product_name)

        db.session.delete(sale)

    current_app.logger.info("Deleted sale id=%s", sale_id)
