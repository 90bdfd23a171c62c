# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Reporting engine: expense and client-invoice aggregates over periods, plus
the dashboard metrics.

QUANTITY RECONSTRUCTION:
Product.quantity is the CURRENT remaining stock. "How many units did we buy
in period P" is therefore rebuilt from the sales ledger: a product created
in P contributes its remaining stock plus what was sold in P; an older
product only contributes what was sold in P. That rule lives in
reconstruct_purchased_quantity() so it can be tested without a database.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable

from flask import current_app
from sqlalchemy import extract, func

from stockroom.extensions import db
from stockroom.errors import ValidationError
from stockroom.models import Product, Sale
from stockroom.time_utils import to_utc_z
from .concurrency import store_access


MONTH_NAMES = {
    "fr": (
        "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
        "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
    ),
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
}

METRIC_TITLES = {
    "fr": {
        "revenue": "Gains Total",
        "products": "Produits Total",
        "expenses": "Dépenses Total",
        "profit": "Bénéfice Total",
    },
    "en": {
        "revenue": "Total Revenue",
        "products": "Total Products",
        "expenses": "Total Expenses",
        "profit": "Total Profit",
    },
}

DEFAULT_LANGUAGE = "fr"


def _display_language() -> str:
    language = current_app.config.get("DISPLAY_LANGUAGE", DEFAULT_LANGUAGE)
    return language if language in MONTH_NAMES else DEFAULT_LANGUAGE


def month_name(month: int, language: str = DEFAULT_LANGUAGE) -> str:
    names = MONTH_NAMES.get(language, MONTH_NAMES[DEFAULT_LANGUAGE])
    return names[month - 1]


def _validate_year(year: int) -> int:
    if not isinstance(year, int) or isinstance(year, bool) or not 1 <= year <= 9999:
        raise ValidationError("year must be a 4-digit year")
    return year


def _validate_month(month: int) -> int:
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    return month


@dataclass(frozen=True)
class Period:
    """
    A day, month or year filter. Unset fields match everything, so the empty
    Period() means "all time".
    """
    year: int | None = None
    month: int | None = None
    day: date | None = None

    @classmethod
    def for_year(cls, year: int) -> "Period":
        return cls(year=_validate_year(year))

    @classmethod
    def for_month(cls, year: int, month: int) -> "Period":
        return cls(year=_validate_year(year), month=_validate_month(month))

    @classmethod
    def for_day(cls, day: date) -> "Period":
        if not isinstance(day, date):
            raise ValidationError("date must be a date (YYYY-MM-DD)")
        if isinstance(day, datetime):
            day = day.date()
        return cls(day=day)

    def contains(self, moment: date | datetime | None) -> bool:
        if moment is None:
            return False
        d = moment.date() if isinstance(moment, datetime) else moment
        if self.day is not None and d != self.day:
            return False
        if self.year is not None and d.year != self.year:
            return False
        if self.month is not None and d.month != self.month:
            return False
        return True

    def label(self, language: str = DEFAULT_LANGUAGE) -> str:
        if self.day is not None:
            return self.day.isoformat()
        if self.year is not None and self.month is not None:
            return f"{month_name(self.month, language)} {self.year:04d}"
        if self.year is not None:
            return f"{self.year:04d}"
        if self.month is not None:
            return month_name(self.month, language)
        return "all"


def reconstruct_purchased_quantity(
    created_at: datetime,
    current_quantity: int,
    sales: Iterable[tuple[datetime, int]],
    in_period: Callable[[datetime], bool],
) -> int:
    """
    Units of a product attributable to a period.

    Args:
        created_at: when the product entered the catalog
        current_quantity: remaining stock right now
        sales: (created_at, quantity) for every sale of this product
        in_period: period predicate

    Returns:
        current_quantity + units sold in the period when the product was
        created in the period, otherwise only the units sold in the period.
    """
    sold_in_period = sum(quantity for sold_at, quantity in sales if in_period(sold_at))
    if in_period(created_at):
        return current_quantity + sold_in_period
    return sold_in_period


def expenses_report(period: Period) -> dict:
    """
    Expense aggregate for a period.

    Returns rows (newest product first) with the reconstructed quantity and
    cost_price x quantity, plus the period's total cost. Products with no
    positive reconstructed quantity are left out.
    """
    with store_access():
        products = (
            db.session.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

        sales_by_name: dict[str, list[tuple[datetime, int]]] = defaultdict(list)
        for product_name, quantity, created_at in db.session.query(
            Sale.product_name, Sale.quantity, Sale.created_at
        ):
            sales_by_name[product_name].append((created_at, quantity))

        expenses = []
        total_cost_cents = 0
        for p in products:
            quantity = reconstruct_purchased_quantity(
                p.created_at, p.quantity, sales_by_name.get(p.name, ()), period.contains,
            )
            if quantity <= 0:
                continue

            total_cost = p.cost_price_cents * quantity
            total_cost_cents += total_cost
            expenses.append({
                "id": p.id,
                "product_name": p.name,
                "cost_price_cents": p.cost_price_cents,
                "quantity": quantity,
                "total_cost_cents": total_cost,
                "date": p.created_at.date().isoformat(),
                "created_at": to_utc_z(p.created_at),
            })

    return {
        "period": period.label(_display_language()),
        "expenses": expenses,
        "total_cost_cents": total_cost_cents,
    }


def expenses_by_year(year: int) -> dict:
    return expenses_report(Period.for_year(year))


def expenses_by_month(year: int, month: int) -> dict:
    return expenses_report(Period.for_month(year, month))


def expenses_by_day(day: date) -> dict:
    return expenses_report(Period.for_day(day))


def client_invoices_report(
    *,
    client_name: str | None = None,
    year: int | None = None,
    month: int | None = None,
    day: date | None = None,
) -> dict:
    """
    Sales matching any combination of client and transaction-date filters.

    Totals: total == credit_total + paid_total, where every status other
    than CREDIT_STATUS counts as paid.
    """
    if year is not None:
        _validate_year(year)
    if month is not None:
        _validate_month(month)
    period = Period(year=year, month=month, day=day)
    credit_status = current_app.config.get("CREDIT_STATUS", "Crédit")

    with store_access():
        query = db.session.query(Sale)
        if client_name:
            query = query.filter(Sale.client_name == client_name)
        if year is not None:
            query = query.filter(extract("year", Sale.date) == year)
        if month is not None:
            query = query.filter(extract("month", Sale.date) == month)
        if day is not None:
            query = query.filter(Sale.date == day)

        sales = query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()
        items = [s.to_dict() for s in sales]

    total_cents = 0
    credit_total_cents = 0
    paid_total_cents = 0
    for item in items:
        total_cents += item["total_amount_cents"]
        if item["status"] == credit_status:
            credit_total_cents += item["total_amount_cents"]
        else:
            paid_total_cents += item["total_amount_cents"]

    if not client_name:
        client_name = items[0]["client_name"] if items else ""

    return {
        "client_name": client_name,
        "period": period.label(_display_language()),
        "items": items,
        "total_cents": total_cents,
        "credit_total_cents": credit_total_cents,
        "paid_total_cents": paid_total_cents,
    }


def client_invoices_by_year(year: int) -> dict:
    return client_invoices_report(year=year)


def client_invoices_by_month(year: int, month: int) -> dict:
    return client_invoices_report(year=year, month=month)


def format_number(value: int) -> str:
    return f"{value:,}".replace(",", " ")


def format_amount(cents: int, currency: str | None = None) -> str:
    """Whole units, space thousands separator, e.g. 150000 -> "1 500 TND"."""
    units = (abs(cents) + 50) // 100
    text = format_number(units)
    if cents < 0 and units:
        text = f"-{text}"
    return f"{text} {currency}" if currency else text


def metrics_summary() -> list[dict]:
    """
    Dashboard metrics: revenue, product count, expenses, profit.

    NOTE: expenses = cost of current inventory + cost of every unit sold
    (sales joined to products by name). Profit = revenue - expenses. This
    counts the cost basis of stock both as inventory and as sold goods, which
    may not be the intended accounting definition; kept as the application
    has always reported it.
    """
    language = _display_language()
    titles = METRIC_TITLES.get(language, METRIC_TITLES[DEFAULT_LANGUAGE])
    currency = current_app.config.get("CURRENCY_LABEL", "TND")

    with store_access():
        revenue_cents = int(
            db.session.query(func.coalesce(func.sum(Sale.total_amount_cents), 0)).scalar() or 0
        )
        products_count = db.session.query(Product).count()
        inventory_cost_cents = int(
            db.session.query(
                func.coalesce(func.sum(Product.cost_price_cents * Product.quantity), 0)
            ).scalar() or 0
        )
        sold_cost_cents = int(
            db.session.query(
                func.coalesce(func.sum(Sale.quantity * Product.cost_price_cents), 0)
            ).select_from(Sale).join(Product, Sale.product_name == Product.name).scalar() or 0
        )

    expenses_cents = inventory_cost_cents + sold_cost_cents
    profit_cents = revenue_cents - expenses_cents

    return [
        {
            "key": "revenue",
            "title": titles["revenue"],
            "value": format_amount(revenue_cents, currency),
            "amount_cents": revenue_cents,
        },
        {
            "key": "products",
            "title": titles["products"],
            "value": format_number(products_count),
            "count": products_count,
        },
        {
            "key": "expenses",
            "title": titles["expenses"],
            "value": format_amount(expenses_cents, currency),
            "amount_cents": expenses_cents,
        },
        {
            "key": "profit",
            "title": titles["profit"],
            "value": format_amount(profit_cents, currency),
            "amount_cents": profit_cents,
        },
    ]
