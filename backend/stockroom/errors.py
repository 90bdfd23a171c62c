# Overview: Domain error taxonomy shared by services and routes.

from __future__ import annotations


class StockroomError(Exception):
    """Base class; routes turn these into {"error": ...} JSON payloads."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self)}
        payload.update(self.details)
        return payload


class NotFoundError(StockroomError):
    """Id or name lookup miss."""

    status_code = 404


class UniqueViolationError(StockroomError):
    """Duplicate product name."""

    status_code = 409


class InsufficientStockError(StockroomError):
    status_code = 409

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient product quantity. Available: {available}, Requested: {requested}",
            details={"product_name": product_name, "available": available, "requested": requested},
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class ValidationError(StockroomError, ValueError):
    """400-level input problem."""

    status_code = 400


class AuthError(StockroomError):
    """Bad credentials, or a missing/expired session."""

    status_code = 401


class StorageError(StockroomError):
    """Underlying store or file failure."""

    status_code = 500
