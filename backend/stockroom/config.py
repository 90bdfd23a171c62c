# backend/stockroom/config.py
from __future__ import annotations
import os

from sqlalchemy.pool import StaticPool


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the process unless DATABASE_URL points elsewhere
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockroom.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # One shared connection for the whole process; access is serialized by the store lock.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }

    # Files kept outside the store (relative paths resolve against the instance folder)
    SESSION_FILE = os.environ.get("STOCKROOM_SESSION_FILE", "session.json")
    SESSION_LIFETIME_DAYS = 30
    THEME_CONFIG_FILE = os.environ.get("STOCKROOM_CONFIG_FILE", "config.json")

    # Display conventions
    DISPLAY_LANGUAGE = os.environ.get("STOCKROOM_LANGUAGE", "fr")
    CURRENCY_LABEL = os.environ.get("STOCKROOM_CURRENCY", "TND")

    # Sale status vocabulary; anything other than CREDIT_STATUS counts as paid
    CREDIT_STATUS = "Crédit"
    SALE_STATUSES = ("Payé", "Khaless", "Crédit")

    # First-run administrator provisioning
    ADMIN_USERNAME = os.environ.get("STOCKROOM_ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.environ.get("STOCKROOM_ADMIN_PASSWORD")

    BCRYPT_ROUNDS = 12
    PASSWORD_MIN_LENGTH = 8

    LOG_LEVEL = os.environ.get("STOCKROOM_LOG_LEVEL", "INFO")
