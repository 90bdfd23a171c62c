# Overview: Flask API routes for reports operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from stockroom.errors import StockroomError, ValidationError
from stockroom.services import reporting_service
from stockroom.time_utils import parse_iso_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _parse_day(value: str | None):
    try:
        day = parse_iso_date(value)
    except ValueError:
        raise ValidationError("date must be a date (YYYY-MM-DD)")
    return day


def _int_arg(name: str) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


@reports_bp.get("/metrics")
def metrics_summary():
    try:
        return jsonify({"metrics": reporting_service.metrics_summary()}), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build metrics summary")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/expenses/year/<int:year>")
def expenses_by_year(year: int):
    try:
        return jsonify(reporting_service.expenses_by_year(year)), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build expenses report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/expenses/month/<int:year>/<int:month>")
def expenses_by_month(year: int, month: int):
    try:
        return jsonify(reporting_service.expenses_by_month(year, month)), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build expenses report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/expenses/day/<day>")
def expenses_by_day(day: str):
    try:
        parsed = _parse_day(day)
        if parsed is None:
            raise ValidationError("date is required")
        return jsonify(reporting_service.expenses_by_day(parsed)), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build expenses report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/invoices/year/<int:year>")
def client_invoices_by_year(year: int):
    try:
        return jsonify(reporting_service.client_invoices_by_year(year)), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build client invoices report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/invoices/month/<int:year>/<int:month>")
def client_invoices_by_month(year: int, month: int):
    try:
        return jsonify(reporting_service.client_invoices_by_month(year, month)), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build client invoices report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/invoices")
def client_invoices():
    """Any combination of ?client=&year=&month=&date= filters."""
    try:
        report = reporting_service.client_invoices_report(
            client_name=(request.args.get("client") or "").strip() or None,
            year=_int_arg("year"),
            month=_int_arg("month"),
            day=_parse_day(request.args.get("date")),
        )
        return jsonify(report), 200
    except StockroomError as exc:
        return jsonify(exc.to_dict()), exc.status_code
    except Exception:
        current_app.logger.exception("Failed to build client invoices report")
        return jsonify({"error": "Internal server error"}), 500
