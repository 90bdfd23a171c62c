# Overview: Flask API routes for settings operations; parses input and returns JSON responses.

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..errors import StockroomError
from ..services import settings_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/theme")
def get_theme():
    try:
        return jsonify({"theme": settings_service.get_theme()}), 200
    except Exception:
        current_app.logger.exception("Failed to read theme preference")
        return jsonify({"error": "Internal server error"}), 500


@settings_bp.put("/theme")
def set_theme():
    try:
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            payload = {}
        theme = settings_service.set_theme(payload.get("theme"))
        return jsonify({"theme": theme}), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to save theme preference")
        return jsonify({"error": "Internal server error"}), 500
