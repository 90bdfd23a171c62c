# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Single-administrator authentication.

Uses bcrypt for password hashing. The admin row is provisioned on first run
(see storage_service.provision_admin) and only ever mutated by
change_password.

SECURITY NOTES:
- Unknown username and wrong password produce the same user-facing error
- Successful login writes the session file (see session_service.py)
- Minimum password length comes from PASSWORD_MIN_LENGTH (default 8)
"""

import secrets

import bcrypt
from flask import current_app

from ..errors import AuthError, NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from . import session_service
from .concurrency import atomic, store_access

INVALID_CREDENTIALS = "Invalid credentials"

# Per-cost-factor throwaway hashes, checked when the username is unknown
_DUMMY_HASHES: dict[int, str] = {}


def validate_password_strength(password: str) -> None:
    """Raises ValidationError if the password is shorter than the configured minimum."""
    min_length = current_app.config.get("PASSWORD_MIN_LENGTH", 8)
    if not isinstance(password, str):
        raise ValidationError("Password must be a string")
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Cost factor comes from BCRYPT_ROUNDS (12 in production, lower in tests).
    """
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise. A malformed stored
    hash counts as a mismatch.
    """
    if not isinstance(password, str) or not isinstance(password_hash, str):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _dummy_hash() -> str:
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    if rounds not in _DUMMY_HASHES:
        _DUMMY_HASHES[rounds] = hash_password(secrets.token_hex(16))
    return _DUMMY_HASHES[rounds]


def get_admin_user() -> User | None:
    """The single administrator row (lowest id when more than one exists)."""
    return db.session.query(User).order_by(User.id.asc()).first()


def authenticate(username: str, password: str) -> dict:
    """
    Verify credentials and open a session.

    Returns the persisted session {"token", "expires_at"}. Raises AuthError with
    the same message whether the username is unknown or the password is wrong;
    in both cases no session file is written.
    """
    with store_access():
        user = db.session.query(User).filter_by(username=username).first()
        password_hash = user.password_hash if user else None

    if password_hash is None:
        verify_password(password or "", _dummy_hash())
        current_app.logger.debug("Login rejected: unknown user %r", username)
        current_app.logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)

    if not verify_password(password or "", password_hash):
        current_app.logger.debug("Login rejected: bad password for %r", username)
        current_app.logger.warning("Failed login attempt")
        raise AuthError(INVALID_CREDENTIALS)

    session = session_service.create_session()
    current_app.logger.info("Administrator signed in")
    return session


def change_password(current_password: str, new_password: str) -> None:
    """
    Re-verify the current password against the admin record, then store a new hash.

    Raises:
        NotFoundError: no administrator is provisioned
        ValidationError: current password is wrong, or the new one is too short
    """
    with atomic():
        user = get_admin_user()
        if user is None:
            raise NotFoundError("Administrator account not found")

        if not verify_password(current_password or "", user.password_hash):
            raise ValidationError("Current password is incorrect")

        validate_password_strength(new_password)
        user.password_hash = hash_password(new_password)

    current_app.logger.info("Administrator password changed")


def set_admin_password(new_password: str) -> dict:
    """Operator recovery: replace the admin password without the current one."""
    validate_password_strength(new_password)
    with atomic():
        user = get_admin_user()
        if user is None:
            raise NotFoundError("Administrator account not found")
        user.password_hash = hash_password(new_password)
        result = user.to_dict()

    current_app.logger.info("Administrator password reset from the command line")
    return result
