# Overview: Store access scopes; serializes every operation on the shared connection.

from __future__ import annotations

from contextlib import contextmanager

from flask import g
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import StorageError, UniqueViolationError
from ..extensions import db, store_lock


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; the store lock is what
    actually serializes writers here, but other DBs will honor it.
    """
    return query.with_for_update()


def _enter_scope() -> int:
    depth = g.get("_store_depth", 0) + 1
    g._store_depth = depth
    return depth


def _exit_scope() -> int:
    depth = g.get("_store_depth", 1) - 1
    g._store_depth = depth
    return depth


@contextmanager
def store_access():
    """
    Hold the store lock for one logical operation.

    The outermost scope releases the session's connection before the lock is
    released, so no transaction state is left behind for another thread to see.
    Serialize results (to_dict) inside the scope.
    """
    with store_lock.lock:
        _enter_scope()
        try:
            yield db.session
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError("Store operation failed", details={"detail": str(exc)}) from exc
        finally:
            if _exit_scope() == 0:
                db.session.close()


@contextmanager
def atomic():
    """
    One all-or-nothing transaction under the store lock.

    Commits when the block completes, rolls back on any exception. Nested
    atomic() calls join the outer transaction.
    """
    with store_access() as session:
        if g.get("_store_atomic"):
            yield session
            return

        g._store_atomic = True
        try:
            yield session
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if "UNIQUE constraint failed" in str(exc.orig):
                raise UniqueViolationError("Unique constraint violated") from exc
            raise StorageError("Store constraint violated", details={"detail": str(exc.orig)}) from exc
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError("Store operation failed", details={"detail": str(exc)}) from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            g._store_atomic = False
