# Overview: Order processor; the one operation that writes a sale and decrements stock together.

from __future__ import annotations

from datetime import date as date_type

from flask import current_app

from ..extensions import db
from ..errors import InsufficientStockError, NotFoundError
from ..models import Sale
from ..validation import check_line_total
from stockroom.time_utils import utcnow
from .concurrency import atomic
from .sales_service import adjust_stock, find_product_by_name


def save_order(
    *,
    client_name: str,
    status: str,
    product_name: str,
    quantity: int,
    date: date_type,
) -> int:
    """
    Place an order atomically.

    Steps, in one transaction:
    1. Look up the product by name
    2. Check quantity <= available stock (before any write)
    3. total = price x quantity
    4. Insert the sale with a snapshot of product price/image
    5. Decrement the product's stock

    Any failure rolls back the whole transaction: there is never a sale
    without its stock decrement, or a decrement without its sale.

    Returns:
        The new sale id

    Raises:
        NotFoundError: unknown product name
        InsufficientStockError: requested more than available
        ValidationError: price x quantity does not fit the store's INTEGER
    """
    with atomic():
        product = find_product_by_name(product_name)
        if not product:
            raise NotFoundError(f"Product '{product_name}' not found", details={"product_name": product_name})

        if product.quantity < quantity:
            current_app.logger.info(
                "Order refused for %r: available %s, requested %s",
                product_name, product.quantity, quantity,
            )
            raise InsufficientStockError(product_name, available=product.quantity, requested=quantity)

        total_amount_cents = check_line_total(product.price_cents, quantity)

        now = utcnow()
        sale = Sale(
            client_name=client_name,
            status=status,
            product_name=product.name,
            product_image=product.image,
            quantity=quantity,
            price_cents=product.price_cents,
            total_amount_cents=total_amount_cents,
            date=date,
            created_at=now,
            updated_at=now,
        )
        db.session.add(sale)
        db.session.flush()
        sale_id = sale.id

        adjust_stock(product, -quantity)

    current_app.logger.info(
        "Saved order sale_id=%s client=%r product=%r quantity=%s",
        sale_id, client_name, product_name, quantity,
    )
    return sale_id
