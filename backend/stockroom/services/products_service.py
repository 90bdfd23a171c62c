# backend/stockroom/services/products_service.py
"""
Products Service (the inventory ledger)

All operations run under the store lock. Mutations use atomic() so a failed
write never leaves a half-applied product behind.

QUANTITY: update_product is a full-record replace and trusts the caller for
stock values; the products table CHECK constraint still refuses a negative
quantity.
"""
from __future__ import annotations
from flask import current_app
from ..extensions import db
from ..errors import NotFoundError, UniqueViolationError
from ..models import Product
from .concurrency import atomic, store_access
from stockroom.time_utils import utcnow

PRODUCT_MUTABLE_FIELDS = {"name", "price_cents", "cost_price_cents", "quantity", "brand", "material", "image"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _require_unique_name(name: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Product).filter(Product.name == name)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise UniqueViolationError(f"A product named '{name}' already exists.", details={"name": name})


def list_products() -> dict:
    """All products, newest created first."""
    with store_access():
        products = (
            db.session.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }


def get_product(product_id: int) -> dict:
    with store_access():
        p = db.session.get(Product, product_id)
        if not p:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        return p.to_dict()


def add_product(*, patch: dict) -> int:
    """
    Create product using a validated patch dict.

    Returns:
        The new product id

    Raises:
        UniqueViolationError: If the name already exists
    """
    with atomic():
        _require_unique_name(patch["name"])

        now = utcnow()
        p = Product(created_at=now, updated_at=now)
        apply_product_patch(p, patch)

        db.session.add(p)
        db.session.flush()  # ensure p.id exists before returning
        product_id = p.id

    current_app.logger.info("Created product id=%s name=%r", product_id, patch["name"])
    return product_id


def update_product(*, product_id: int, patch: dict) -> dict:
    """
    Replace a product's mutable fields and refresh updated_at.

    Raises:
        NotFoundError: If the product does not exist
        UniqueViolationError: If renamed onto an existing name
    """
    with atomic():
        p = db.session.get(Product, product_id)
        if not p:
            raise NotFoundError("Product not found", details={"product_id": product_id})

        if "name" in patch and patch["name"] != p.name:
            _require_unique_name(patch["name"], exclude_id=p.id)

        apply_product_patch(p, patch)
        p.updated_at = utcnow()
        db.session.flush()
        result = p.to_dict()

    current_app.logger.info("Updated product id=%s fields=%s", product_id, ", ".join(sorted(patch.keys())))
    return result


def delete_product(*, product_id: int) -> None:
    """
    Hard-delete a product.

    Sales referencing it by name are left untouched; they carry their own
    snapshot of name, image and price.
    """
    with atomic():
        p = db.session.get(Product, product_id)
        if not p:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        db.session.delete(p)

    current_app.logger.info("Deleted product id=%s", product_id)
