# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockroom/routes/products.py
"""
Product management routes (the inventory ledger).

Create and update are full-record writes: every mutable field is required.
"""
from flask import Blueprint, request, jsonify, current_app
from ..services import products_service
from ..models import Product
from ..errors import StockroomError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "cost_price_cents", "quantity", "brand", "material", "image"},
    required_on_create={"name", "price_cents", "cost_price_cents", "quantity", "brand", "material"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _product_patch() -> dict:
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)
    patch.setdefault("image", None)
    return patch


@products_bp.get("")
def list_products():
    """List all products, newest first."""
    try:
        return jsonify(products_service.list_products()), 200
    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.post("")
def create_product_route():
    """Create a new product. Returns {"id": <new id>}."""
    try:
        patch = _product_patch()
        product_id = products_service.add_product(patch=patch)
        return jsonify({"id": product_id}), 201

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        return jsonify(products_service.get_product(product_id)), 200
    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """Replace a product's fields."""
    try:
        patch = _product_patch()
        updated = products_service.update_product(product_id=product_id, patch=patch)
        return jsonify(updated), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    """Hard-delete a product. Historical sales are kept."""
    try:
        products_service.delete_product(product_id=product_id)
        return jsonify({"ok": True}), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500
