# Overview: Request decorators for API routes.

import secrets
from functools import wraps
from flask import request, jsonify, g

from .services import session_service


def require_session(f):
    """
    Require a valid persisted session.

    SECURITY: Returns 401 if:
    - No session file, or it cannot be parsed
    - The session has expired
    - An Authorization: Bearer token is sent and does not match the session

    Sets g.session to the persisted {"token", "expires_at"} mapping.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        session = session_service.load_session()

        if not session_service.is_session_valid(session):
            return jsonify({"error": "Authentication required"}), 401

        auth_header = request.headers.get("Authorization")
        if auth_header:
            if not auth_header.startswith("Bearer "):
                return jsonify({"error": "Invalid or expired token"}), 401
            token = auth_header.split(" ", 1)[1]
            if not secrets.compare_digest(token, str(session["token"])):
                return jsonify({"error": "Invalid or expired token"}), 401

        g.session = session
        return f(*args, **kwargs)

    return decorated_function
