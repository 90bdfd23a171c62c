"""
Reporting engine tests.

Verifies:
- Purchased-quantity reconstruction (pure function, no store)
- Period labels in both display languages
- Expense aggregates per year/month/day
- Client invoice totals split into credit and paid
- Dashboard metrics, including the inventory + sold cost expense figure
"""

from datetime import date, datetime

import pytest

from stockroom.errors import ValidationError
from stockroom.models import Product, Sale
from stockroom.services import order_service, products_service, reporting_service
from stockroom.services.reporting_service import Period, reconstruct_purchased_quantity


# =============================================================================
# PURE HELPERS
# =============================================================================


JANUARY = Period.for_month(2024, 1).contains


class TestReconstructPurchasedQuantity:
    def test_created_in_period_adds_current_stock(self):
        sales = [(datetime(2024, 1, 15), 3), (datetime(2024, 2, 3), 2)]
        assert reconstruct_purchased_quantity(datetime(2024, 1, 10), 5, sales, JANUARY) == 8

    def test_created_before_period_counts_only_sales(self):
        sales = [(datetime(2024, 1, 15), 3), (datetime(2024, 1, 20), 1), (datetime(2024, 2, 3), 2)]
        assert reconstruct_purchased_quantity(datetime(2023, 12, 1), 5, sales, JANUARY) == 4

    def test_nothing_in_period(self):
        assert reconstruct_purchased_quantity(datetime(2023, 12, 1), 5, [], JANUARY) == 0


class TestPeriod:
    def test_month_labels(self):
        assert Period.for_month(2024, 1).label("fr") == "Janvier 2024"
        assert Period.for_month(2024, 8).label("fr") == "Août 2024"
        assert Period.for_month(2024, 12).label("en") == "December 2024"

    def test_year_and_day_labels(self):
        assert Period.for_year(2024).label() == "2024"
        assert Period.for_day(date(2024, 3, 5)).label() == "2024-03-05"
        assert Period(month=3).label() == "Mars"
        assert Period().label() == "all"

    def test_contains(self):
        march = Period.for_month(2024, 3)
        assert march.contains(datetime(2024, 3, 31, 23, 59))
        assert not march.contains(datetime(2024, 4, 1))
        assert not march.contains(datetime(2023, 3, 10))
        assert not march.contains(None)
        assert Period.for_day(date(2024, 3, 5)).contains(datetime(2024, 3, 5, 12, 0))
        assert Period().contains(date(1999, 1, 1))

    @pytest.mark.parametrize("year,month", [(2024, 0), (2024, 13), (0, 1), (10000, 1)])
    def test_invalid_month_period(self, year, month):
        with pytest.raises(ValidationError):
            Period.for_month(year, month)

    def test_day_requires_a_date(self):
        with pytest.raises(ValidationError):
            Period.for_day("2024-03-05")


class TestFormatting:
    def test_format_amount(self):
        assert reporting_service.format_amount(150000, "TND") == "1 500 TND"
        assert reporting_service.format_amount(12345) == "123"
        assert reporting_service.format_amount(0, "TND") == "0 TND"
        assert reporting_service.format_amount(-5000, "TND") == "-50 TND"

    def test_format_number(self):
        assert reporting_service.format_number(1234567) == "1 234 567"


# =============================================================================
# EXPENSES
# =============================================================================


@pytest.fixture
def january_chair(chair, backdate):
    """
    Chair created 2024-01-10 with 10 units; 3 sold in January, 2 in February.
    Current stock ends at 5.
    """
    backdate(Product, chair, created_at=datetime(2024, 1, 10))

    jan = order_service.save_order(
        client_name="Alice", status="Payé", product_name="Chair", quantity=3, date=date(2024, 1, 15),
    )
    backdate(Sale, jan, created_at=datetime(2024, 1, 15, 10, 0))

    feb = order_service.save_order(
        client_name="Bob", status="Crédit", product_name="Chair", quantity=2, date=date(2024, 2, 3),
    )
    backdate(Sale, feb, created_at=datetime(2024, 2, 3, 16, 30))
    return chair


class TestExpenses:
    def test_creation_month(self, january_chair):
        report = reporting_service.expenses_by_month(2024, 1)

        assert report["period"] == "Janvier 2024"
        assert len(report["expenses"]) == 1
        row = report["expenses"][0]
        assert row["product_name"] == "Chair"
        assert row["quantity"] == 8
        assert row["cost_price_cents"] == 2000
        assert row["total_cost_cents"] == 16000
        assert row["date"] == "2024-01-10"
        assert report["total_cost_cents"] == 16000

    def test_later_month_counts_only_its_sales(self, january_chair):
        report = reporting_service.expenses_by_month(2024, 2)
        assert report["expenses"][0]["quantity"] == 2
        assert report["total_cost_cents"] == 4000

    def test_month_without_activity(self, january_chair):
        report = reporting_service.expenses_by_month(2024, 3)
        assert report == {"period": "Mars 2024", "expenses": [], "total_cost_cents": 0}

    def test_year(self, january_chair):
        report = reporting_service.expenses_by_year(2024)
        assert report["period"] == "2024"
        assert report["expenses"][0]["quantity"] == 10
        assert report["total_cost_cents"] == 20000

    def test_day(self, january_chair):
        report = reporting_service.expenses_by_day(date(2024, 2, 3))
        assert report["period"] == "2024-02-03"
        assert report["total_cost_cents"] == 4000

    def test_rows_newest_product_first(self, make_product, backdate):
        old = make_product(name="Stool", cost_price_cents=1000, quantity=1)
        new = make_product(name="Bench", cost_price_cents=3000, quantity=2)
        backdate(Product, old, created_at=datetime(2024, 5, 1))
        backdate(Product, new, created_at=datetime(2024, 5, 20))

        report = reporting_service.expenses_by_month(2024, 5)
        assert [r["product_name"] for r in report["expenses"]] == ["Bench", "Stool"]
        assert report["total_cost_cents"] == 7000

    def test_english_labels(self, app, january_chair):
        app.config["DISPLAY_LANGUAGE"] = "en"
        assert reporting_service.expenses_by_month(2024, 1)["period"] == "January 2024"


# =============================================================================
# CLIENT INVOICES
# =============================================================================


@pytest.fixture
def invoices(make_product):
    make_product(name="Chair", price_cents=5000, quantity=20)
    ids = {}
    ids["alice_paid"] = order_service.save_order(
        client_name="Alice", status="Payé", product_name="Chair", quantity=3, date=date(2024, 3, 5),
    )
    ids["alice_credit"] = order_service.save_order(
        client_name="Alice", status="Crédit", product_name="Chair", quantity=1, date=date(2024, 3, 20),
    )
    ids["bob_khaless"] = order_service.save_order(
        client_name="Bob", status="Khaless", product_name="Chair", quantity=2, date=date(2024, 4, 1),
    )
    return ids


def assert_totals_consistent(report):
    assert report["total_cents"] == report["credit_total_cents"] + report["paid_total_cents"]
    assert report["total_cents"] == sum(item["total_amount_cents"] for item in report["items"])


class TestClientInvoices:
    def test_client_month(self, invoices):
        report = reporting_service.client_invoices_report(client_name="Alice", year=2024, month=3)

        assert report["client_name"] == "Alice"
        assert report["period"] == "Mars 2024"
        assert len(report["items"]) == 2
        assert report["total_cents"] == 20000
        assert report["credit_total_cents"] == 5000
        assert report["paid_total_cents"] == 15000
        assert_totals_consistent(report)

    def test_year_without_client_uses_newest_row(self, invoices):
        report = reporting_service.client_invoices_by_year(2024)

        assert report["client_name"] == "Bob"
        assert report["period"] == "2024"
        assert report["items"][0]["id"] == invoices["bob_khaless"]
        assert report["total_cents"] == 30000
        assert report["paid_total_cents"] == 25000
        assert_totals_consistent(report)

    def test_by_month(self, invoices):
        report = reporting_service.client_invoices_by_month(2024, 4)
        assert [item["id"] for item in report["items"]] == [invoices["bob_khaless"]]
        assert_totals_consistent(report)

    def test_by_day(self, invoices):
        report = reporting_service.client_invoices_report(day=date(2024, 3, 20))
        assert report["period"] == "2024-03-20"
        assert report["credit_total_cents"] == 5000
        assert report["paid_total_cents"] == 0
        assert_totals_consistent(report)

    def test_month_without_year(self, invoices):
        report = reporting_service.client_invoices_report(month=3)
        assert report["period"] == "Mars"
        assert len(report["items"]) == 2

    @pytest.mark.parametrize("filters", [
        {},
        {"client_name": "Alice"},
        {"client_name": "Bob", "year": 2024},
        {"year": 2023},
        {"client_name": "Nobody"},
    ])
    def test_totals_consistent_for_any_filter(self, invoices, filters):
        assert_totals_consistent(reporting_service.client_invoices_report(**filters))

    def test_no_match(self, invoices):
        report = reporting_service.client_invoices_report(year=2023)
        assert report["client_name"] == ""
        assert report["items"] == []
        assert report["total_cents"] == 0

    def test_invalid_month(self, app):
        with pytest.raises(ValidationError):
            reporting_service.client_invoices_by_month(2024, 13)


# =============================================================================
# METRICS
# =============================================================================


class TestMetrics:
    def test_summary(self, chair):
        order_service.save_order(
            client_name="Alice", status="Payé", product_name="Chair", quantity=3, date=date(2024, 3, 5),
        )

        metrics = {m["key"]: m for m in reporting_service.metrics_summary()}

        assert metrics["revenue"]["amount_cents"] == 15000
        assert metrics["revenue"]["value"] == "150 TND"
        assert metrics["revenue"]["title"] == "Gains Total"
        assert metrics["products"]["count"] == 1
        assert metrics["products"]["value"] == "1"
        # inventory 7 x 20.00 + sold 3 x 20.00
        assert metrics["expenses"]["amount_cents"] == 20000
        assert metrics["profit"]["amount_cents"] == -5000
        assert metrics["profit"]["value"] == "-50 TND"

    def test_sold_units_of_deleted_products_have_no_cost(self, chair):
        order_service.save_order(
            client_name="Alice", status="Payé", product_name="Chair", quantity=3, date=date(2024, 3, 5),
        )
        products_service.delete_product(product_id=chair)

        metrics = {m["key"]: m for m in reporting_service.metrics_summary()}
        assert metrics["revenue"]["amount_cents"] == 15000
        assert metrics["expenses"]["amount_cents"] == 0
        assert metrics["profit"]["amount_cents"] == 15000

    def test_empty_store(self, app):
        metrics = reporting_service.metrics_summary()
        assert [m["key"] for m in metrics] == ["revenue", "products", "expenses", "profit"]
        assert all(m.get("amount_cents", m.get("count")) == 0 for m in metrics)
