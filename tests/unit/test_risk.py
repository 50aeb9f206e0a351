"""Unit tests for customer risk classification"""

import pytest

from collections_kpi.domain.risk import build_customer_profiles, calculate_customer_risk, classify_risk


@pytest.mark.parametrize(
    "avg_delay,overdue,exposure,expected",
    [
        (61, 0, 100, "High"),
        (0, 60, 100, "High"),
        (31, 0, 100, "Medium"),
        (0, 25, 100, "Medium"),
        (0, 20, 100, "Low"),
        (30, 0, 100, "Low"),
        (0, 0, 0, "Low"),
        (0, 10, 0, "Low"),
        (61, 0, 0, "High"),
    ],
)
def test_classify_risk(avg_delay, overdue, exposure, expected):
    assert classify_risk(avg_delay, overdue, exposure) == expected


def test_customer_risk_aggregates_and_sorts(make_invoice):
    invoices = [
        make_invoice(customer_name="Acme", total_balance=100, mtd_overdue=40),
        make_invoice(customer_name="Acme", total_balance=100, mtd_overdue=0),
        make_invoice(customer_name="Globex", total_balance=1000, collector_name="Bob", customer_type="Government"),
    ]

    risks = calculate_customer_risk(invoices)

    assert [r.name for r in risks] == ["Globex", "Acme"]
    globex, acme = risks
    assert globex.risk_level == "Low"
    assert globex.collector_name == "Bob"
    assert globex.customer_type == "Government"
    assert acme.total_exposure == 200
    assert acme.overdue_amount == 100
    # Averaged over overdue invoices only
    assert acme.avg_delay == 40
    assert acme.risk_level == "Medium"


def test_every_customer_gets_exactly_one_tier(make_invoice):
    invoices = [
        make_invoice(customer_name=name, total_balance=balance, mtd_overdue=delay)
        for name, balance, delay in [
            ("A", 0, 0),
            ("B", 500, 90),
            ("C", 300, 35),
            ("A", 0, 0),
            ("D", 1000, 0),
        ]
    ]
    risks = calculate_customer_risk(invoices)

    assert sorted(r.name for r in risks) == ["A", "B", "C", "D"]
    assert all(r.risk_level in {"Low", "Medium", "High"} for r in risks)
    assert sum(len(r.invoices) for r in risks) == len(invoices)


def test_zero_exposure_customer_does_not_crash(make_invoice):
    [risk] = calculate_customer_risk([make_invoice(total_balance=0, mtd_overdue=5)])
    assert risk.risk_level == "Low"
    assert risk.avg_delay == 5


def test_customer_profiles(make_invoice):
    invoices = [
        make_invoice(customer_name="Acme", total_balance=300, amount_collected=700),
        make_invoice(customer_name="Acme", total_balance=0, amount_collected=500),
    ]

    [profile] = build_customer_profiles(invoices)

    assert profile.id == "QWNtZQ=="
    assert profile.total_outstanding == 300
    assert profile.total_collected == 1200
    assert profile.total_invoiced == 1500
    assert profile.risk_level == "Low"
