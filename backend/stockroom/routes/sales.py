# Overview: Flask API routes for sales and orders; parses input and returns JSON responses.

# backend/stockroom/routes/sales.py
"""Sales ledger and order processor API routes"""

from flask import Blueprint, request, jsonify, current_app

from ..models import Sale
from ..services import order_service, sales_service
from ..errors import StockroomError
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_order

SALE_POLICY = ModelValidationPolicy(
    writable_fields={"client_name", "status", "product_name", "quantity", "date"},
    required_on_create={"client_name", "status", "product_name", "quantity", "date"},
)


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")
orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _sale_patch() -> dict:
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY, partial=False)
    enforce_rules_order(patch, current_app.config["SALE_STATUSES"])
    return patch


@orders_bp.post("")
def save_order_route():
    """
    Place an order: writes the sale and decrements stock atomically.

    Body: {"client_name", "status", "product_name", "quantity", "date"}
    Returns {"id": <sale id>}; 404 for an unknown product, 409 with
    available/requested when stock is insufficient.
    """
    try:
        patch = _sale_patch()
        sale_id = order_service.save_order(**patch)
        return jsonify({"id": sale_id}), 201

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to save order")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
def list_sales_route():
    try:
        return jsonify(sales_service.list_sales()), 200
    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    try:
        return jsonify(sales_service.get_sale(sale_id)), 200
    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code


@sales_bp.put("/<int:sale_id>")
def update_sale_route(sale_id: int):
    """Edit a sale; stock is reconciled in the same transaction."""
    try:
        patch = _sale_patch()
        updated = sales_service.update_sale(sale_id, patch)
        return jsonify(updated), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<int:sale_id>")
def delete_sale_route(sale_id: int):
    """Delete a sale and return its quantity to stock."""
    try:
        sales_service.delete_sale(sale_id)
        return jsonify({"ok": True}), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500
