"""Days Sales Outstanding under five methodologies"""

import logging
from datetime import date
from typing import Optional, Sequence, Union

from collections_kpi.domain.models import Invoice
from collections_kpi.domain.parameters import DSOMethod
from collections_kpi.utils.date_utils import days_between
from collections_kpi.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30


def invoice_age(invoice: Invoice, today: date) -> int:
    """
    Days since the invoice date, never negative.

    Age is measured from the invoice date even when KPIs are filtered or
    bucketed by due date; DSO is defined on invoice age.
    """
    return max(0, days_between(today, invoice.invoice_date))


def _finalize(value: float) -> int:
    return max(0, round_half_up(value))


def calculate_weighted_dso(invoices: Sequence[Invoice], today: Optional[date] = None) -> int:
    """SUM(age * amount) / SUM(amount)"""
    today = today or date.today()
    total_sales = sum(inv.total_amount for inv in invoices)
    if total_sales == 0:
        return 0
    weighted_sum = sum(inv.total_amount * invoice_age(inv, today) for inv in invoices)
    return _finalize(weighted_sum / total_sales)


def calculate_simple_average_dso(invoices: Sequence[Invoice], today: Optional[date] = None) -> int:
    """SUM(age) / COUNT(invoices)"""
    if not invoices:
        return 0
    today = today or date.today()
    total_age = sum(invoice_age(inv, today) for inv in invoices)
    return _finalize(total_age / len(invoices))


def calculate_traditional_dso(invoices: Sequence[Invoice], period_days: int = DEFAULT_PERIOD_DAYS) -> int:
    """(Total outstanding / total credit sales) * days in period"""
    total_sales = sum(inv.total_amount for inv in invoices)
    if total_sales == 0:
        return 0
    total_outstanding = sum(inv.total_balance for inv in invoices)
    return _finalize(total_outstanding / total_sales * period_days)


def calculate_countback_dso(invoices: Sequence[Invoice], today: Optional[date] = None) -> int:
    """
    Count back through sales, newest first, until they cover current AR.

    Returns the age of the invoice at which cumulative sales first reach the
    total outstanding balance, or the oldest invoice's age if they never do.
    """
    total_outstanding = sum(inv.total_balance for inv in invoices)
    if total_outstanding <= 0:
        return 0

    today = today or date.today()
    newest_first = sorted(invoices, key=lambda inv: inv.invoice_date, reverse=True)

    accumulated = 0.0
    days_count = 0
    # One pass, at most one step per invoice
    for inv in newest_first[: len(invoices)]:
        accumulated += inv.total_amount
        days_count = invoice_age(inv, today)
        if accumulated >= total_outstanding:
            return days_count

    return days_count


def calculate_best_possible_dso(invoices: Sequence[Invoice], period_days: int = DEFAULT_PERIOD_DAYS) -> int:
    """(Current, not overdue, AR / total credit sales) * days in period"""
    total_sales = sum(inv.total_amount for inv in invoices)
    if total_sales == 0:
        return 0
    current_ar = sum(inv.total_balance for inv in invoices if not inv.is_overdue)
    return _finalize(current_ar / total_sales * period_days)


def calculate_dso(
    invoices: Sequence[Invoice],
    method: Union[DSOMethod, str] = DSOMethod.WEIGHTED,
    period_days: int = DEFAULT_PERIOD_DAYS,
    today: Optional[date] = None,
) -> int:
    """Dispatch to the selected DSO method; unknown names use weighted"""
    try:
        method = DSOMethod(method)
    except ValueError:
        logger.debug("Unknown DSO method %r, using weighted", method)
        method = DSOMethod.WEIGHTED

    if method is DSOMethod.SIMPLE:
        return calculate_simple_average_dso(invoices, today)
    if method is DSOMethod.TRADITIONAL:
        return calculate_traditional_dso(invoices, period_days)
    if method is DSOMethod.COUNTBACK:
        return calculate_countback_dso(invoices, today)
    if method is DSOMethod.BEST_POSSIBLE:
        return calculate_best_possible_dso(invoices, period_days)
    return calculate_weighted_dso(invoices, today)
