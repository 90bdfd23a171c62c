# Overview: Flask extension instances for the database, migrations and the store lock.

import sqlite3
import threading

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine


class StoreLock:
    """
    Process-wide mutual exclusion over the store handle.

    The lock lives in app.extensions so every operation reaches it through
    the application context instead of a module global.
    """

    extension_key = "stockroom_store_lock"

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        app.extensions[self.extension_key] = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        return current_app.extensions[self.extension_key]


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


db = SQLAlchemy()
migrate = Migrate()
store_lock = StoreLock()
