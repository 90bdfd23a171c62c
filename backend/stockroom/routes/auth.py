# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockroom/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Same error for unknown user and wrong password
- Session persisted as a file with a 30-day absolute expiry
- Password change requires a valid session and the current password
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import auth_service
from ..services import session_service
from ..errors import StockroomError, ValidationError
from ..decorators import require_session


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _credential_fields(data: dict, *names: str) -> list:
    """Values of the named fields; each must be a string when present."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    values = []
    for name in names:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{name} must be a string")
        values.append(value)
    return values


@auth_bp.post("/login")
def login_route():
    """
    Authenticate the administrator and create a session.

    Returns {"token", "expires_at"} on success.
    """
    try:
        data = request.get_json(silent=True) or {}
        username, password = _credential_fields(data, "username", "password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        session = auth_service.authenticate(username, password)

        return jsonify({
            "token": session["token"],
            "expires_at": session["expires_at"],
            "message": "Login successful",
        }), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/session")
def check_session_route():
    """Whether a valid session exists. Does not extend it."""
    return jsonify({"valid": session_service.check_session()}), 200


@auth_bp.post("/logout")
def logout_route():
    """Delete the persisted session."""
    try:
        session_service.clear_session()
        return jsonify({"message": "Logout successful"}), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/change-password")
@require_session
def change_password_route():
    """
    Change the administrator password.

    Body: {"current_password": ..., "new_password": ...}
    """
    try:
        data = request.get_json(silent=True) or {}
        current_password, new_password = _credential_fields(data, "current_password", "new_password")

        if current_password is None or new_password is None:
            return jsonify({"error": "current_password and new_password required"}), 400

        auth_service.change_password(current_password, new_password)
        return jsonify({"message": "Password changed"}), 200

    except StockroomError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Internal server error"}), 500
