# Overview: Service-layer operations for session; persists the bearer credential to a file.

"""
Session token management.

The session lives OUTSIDE the relational store, as a small JSON file holding
{"token": ..., "expires_at": ...}. The file is read and written wholesale; it
is not touched by the store lock.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Absolute expiry SESSION_LIFETIME_DAYS after issuance (30 days)
- Checking a session never extends it
- Logout deletes the file
"""

import json
import os
import secrets
from datetime import timedelta
from pathlib import Path

from flask import current_app

from ..errors import StorageError
from stockroom.time_utils import parse_iso_datetime, to_utc_z, utcnow


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    """
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def session_path() -> Path:
    path = Path(current_app.config["SESSION_FILE"])
    if not path.is_absolute():
        path = Path(current_app.instance_path) / path
    return path


def create_session() -> dict:
    """Issue a new session, persist it, and return it."""
    lifetime = timedelta(days=current_app.config.get("SESSION_LIFETIME_DAYS", 30))
    session = {
        "token": generate_token(),
        "expires_at": to_utc_z(utcnow() + lifetime),
    }

    path = session_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(session), encoding="utf-8")
    except OSError as exc:
        raise StorageError("Failed to save session", details={"detail": str(exc)}) from exc

    return session


def load_session() -> dict | None:
    """Persisted session, or None when missing or unreadable."""
    path = session_path()
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError:
        current_app.logger.exception("Failed to read session file")
        return None

    try:
        session = json.loads(contents)
    except ValueError:
        current_app.logger.warning("Ignoring corrupt session file %s", path)
        return None

    if not isinstance(session, dict) or "token" not in session or "expires_at" not in session:
        return None
    return session


def is_session_valid(session: dict | None) -> bool:
    if not session:
        return False
    try:
        expires_at = parse_iso_datetime(session["expires_at"])
    except (TypeError, ValueError):
        return False
    if expires_at is None:
        return False
    return utcnow() < expires_at


def check_session() -> bool:
    """True iff a persisted, unexpired session exists. Never refreshes expiry."""
    return is_session_valid(load_session())


def clear_session() -> None:
    """Logout: delete the session file if present."""
    path = session_path()
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise StorageError("Failed to clear session", details={"detail": str(exc)}) from exc
