# Overview: Storage engine bootstrap; schema creation and first-run provisioning.

from __future__ import annotations

import secrets

from flask import Flask, current_app

from ..errors import StockroomError
from ..extensions import db
from ..models import Product, Sale, User
from .auth_service import hash_password
from .concurrency import atomic, store_access


def provision_admin(username: str | None = None, password: str | None = None) -> tuple[dict, str | None] | None:
    """
    Create the administrator if and only if the users table is empty.

    Uses the given credentials, else ADMIN_USERNAME / ADMIN_PASSWORD from
    config. When no password is configured a random one is generated and
    returned so the operator can sign in once and change it.

    Returns (user_dict, generated_password_or_None), or None when an account
    already exists.
    """
    username = username or current_app.config.get("ADMIN_USERNAME", "admin")
    password = password or current_app.config.get("ADMIN_PASSWORD")

    with atomic():
        if db.session.query(User).count() > 0:
            return None

        generated = None
        if not password:
            generated = secrets.token_urlsafe(12)
            password = generated

        user = User(username=username, password_hash=hash_password(password))
        db.session.add(user)
        db.session.flush()
        result = user.to_dict()

    if generated:
        current_app.logger.warning(
            'Created administrator "%s" with generated password "%s". Change it immediately!',
            username,
            generated,
        )
    else:
        current_app.logger.info('Created administrator "%s"', username)
    return result, generated


def bootstrap_storage(app: Flask) -> None:
    """
    Idempotently create users/products/sales and provision the admin.

    Any failure is fatal: the process must not start with a broken schema.
    """
    with app.app_context():
        try:
            with store_access():
                db.create_all()
            provision_admin()
        except StockroomError as exc:
            app.logger.critical("Failed to initialize database: %s", exc)
            raise SystemExit(1) from exc

        app.logger.info("Database initialized at %s", app.config["SQLALCHEMY_DATABASE_URI"])


def database_health() -> dict:
    """Row counts used by the health endpoint."""
    with store_access():
        return {
            "users": db.session.query(User).count(),
            "products": db.session.query(Product).count(),
            "sales": db.session.query(Sale).count(),
        }
