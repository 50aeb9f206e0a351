"""Unit tests for KPI aggregation"""

from datetime import date, timedelta

from collections_kpi.domain.kpis import (
    calculate_30_days,
    calculate_add,
    calculate_cei,
    calculate_collection_rate,
    calculate_kpis,
)
from collections_kpi.domain.parameters import DEFAULT_PARAMETERS, DSOMethod

TODAY = date(2025, 6, 15)


def test_fully_collected_invoice_snapshot(make_invoice):
    invoices = [
        make_invoice(
            invoice_date=TODAY - timedelta(days=100),
            total_amount=1000,
            total_balance=0,
            amount_collected=1000,
        )
    ]
    kpis = calculate_kpis(invoices, DEFAULT_PARAMETERS, TODAY)

    assert kpis.dso == 100
    assert kpis.collection_rate == 100
    assert kpis.cei == 100
    assert kpis.total_invoices == 1
    assert kpis.total_outstanding == 0


def test_cei_empty_set_is_100():
    assert calculate_cei([]) == 100


def test_cei_splits_beginning_ar_and_credit_sales(make_invoice):
    invoices = [
        # Carried over: contributes its opening balance, not its amount
        make_invoice(total_amount=5000, opening_balance=400, total_balance=200, mtd_overdue=20),
        make_invoice(total_amount=1000, total_balance=500),
    ]
    # (400 + 1000 - 700) / (400 + 1000 - 500) * 100 = 77.8
    assert calculate_cei(invoices) == 78


def test_cei_zero_opening_balance_counts_as_credit_sale(make_invoice):
    invoices = [make_invoice(total_amount=1000, opening_balance=0, total_balance=250)]
    # (1000 - 250) / (1000 - 250)
    assert calculate_cei(invoices) == 100


def test_collection_rate_zero_amount_returns_zero(make_invoice):
    invoices = [make_invoice(total_amount=0, amount_collected=50)]
    assert calculate_collection_rate(invoices) == 0


def test_collection_rate_rounds_to_percent(make_invoice):
    invoices = [make_invoice(total_amount=3000, amount_collected=1000)]
    assert calculate_collection_rate(invoices) == 33


def test_30_day_ratio(make_invoice):
    due = date(2025, 4, 1)
    invoices = [
        make_invoice(total_amount=1000, amount_collected=1000, due_date=due, payment_date=due + timedelta(days=30)),
        make_invoice(total_amount=1000, amount_collected=1000, due_date=due, payment_date=due + timedelta(days=31)),
        make_invoice(total_amount=1000, amount_collected=0, due_date=due),
        make_invoice(total_amount=0, amount_collected=900, due_date=due, payment_date=due),
    ]
    # 1000 / 3000 eligible
    assert calculate_30_days(invoices) == 33


def test_30_day_ratio_counts_early_payments(make_invoice):
    due = date(2025, 4, 1)
    invoices = [make_invoice(total_amount=800, amount_collected=800, due_date=due, payment_date=due - timedelta(days=10))]
    assert calculate_30_days(invoices) == 100


def test_30_day_ratio_without_eligible_invoices(make_invoice):
    assert calculate_30_days([]) == 0
    assert calculate_30_days([make_invoice(total_amount=0)]) == 0


def test_add_is_dso_above_best_possible(make_invoice):
    overdue = [make_invoice(invoice_date=TODAY - timedelta(days=40), total_balance=1000, mtd_overdue=10)]
    assert calculate_add(overdue, today=TODAY) == 40


def test_add_never_negative(make_invoice):
    current = [make_invoice(invoice_date=TODAY, total_amount=1000, total_balance=1000)]
    # DSO 0, best possible 30
    assert calculate_add(current, today=TODAY) == 0


def test_kpis_use_selected_method_and_period_days(make_invoice):
    invoices = [
        make_invoice(invoice_date=TODAY - timedelta(days=60), total_amount=1000, total_balance=500),
        make_invoice(invoice_date=TODAY - timedelta(days=10), total_amount=1000, total_balance=0, amount_collected=1000),
    ]
    params = DEFAULT_PARAMETERS.model_copy(update={"dso_method": DSOMethod.TRADITIONAL, "dso_period_days": 60})

    kpis = calculate_kpis(invoices, params, TODAY)

    # 500 / 2000 * 60
    assert kpis.dso == 15
    assert kpis.best_possible_dso == 15
    assert kpis.add == 0
    assert kpis.collection_rate == 50
    assert kpis.total_amount == 2000
    assert kpis.total_collected == 1000
    assert kpis.total_outstanding == 500
