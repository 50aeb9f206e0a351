"""KPI aggregation - CEI, ADD, collection rate and 30-day ratio"""

from datetime import date
from typing import Optional, Sequence, Union

from collections_kpi.domain.dso import DEFAULT_PERIOD_DAYS, calculate_best_possible_dso, calculate_dso
from collections_kpi.domain.models import Invoice, KPISnapshot
from collections_kpi.domain.parameters import DEFAULT_PARAMETERS, DSOMethod, GlobalParameters
from collections_kpi.utils.date_utils import days_between
from collections_kpi.utils.rounding import round_half_up


def calculate_cei(invoices: Sequence[Invoice]) -> int:
    """
    Collection Effectiveness Index.

    (Beginning AR + Credit Sales - Ending AR) /
    (Beginning AR + Credit Sales - Ending Current AR) * 100

    - Invoices with a positive opening balance contribute that balance to
      beginning AR; all others contribute their amount to credit sales
    - Ending AR is the sum of balances; ending current AR excludes overdue ones
    - An empty AR base (zero denominator) scores 100
    """
    beginning_ar = 0.0
    credit_sales = 0.0
    ending_ar = 0.0
    overdue_ar = 0.0

    for inv in invoices:
        ending_ar += inv.total_balance
        if inv.is_overdue:
            overdue_ar += inv.total_balance
        if inv.opening_balance is not None and inv.opening_balance > 0:
            beginning_ar += inv.opening_balance
        else:
            credit_sales += inv.total_amount

    ending_current_ar = ending_ar - overdue_ar
    numerator = beginning_ar + credit_sales - ending_ar
    denominator = beginning_ar + credit_sales - ending_current_ar

    if denominator == 0:
        return 100
    return round_half_up(numerator / denominator * 100)


def calculate_add(
    invoices: Sequence[Invoice],
    dso_method: Union[DSOMethod, str] = DSOMethod.WEIGHTED,
    period_days: int = DEFAULT_PERIOD_DAYS,
    today: Optional[date] = None,
) -> int:
    """Average Days Delinquent: DSO minus best possible DSO, floored at 0"""
    dso = calculate_dso(invoices, dso_method, period_days, today)
    best = calculate_best_possible_dso(invoices, period_days)
    return max(0, dso - best)


def calculate_30_days(invoices: Sequence[Invoice]) -> int:
    """Percent of invoiced amount collected within 30 days of the due date"""
    eligible = [inv for inv in invoices if inv.total_amount > 0]
    if not eligible:
        return 0

    collected_within_30 = sum(
        inv.amount_collected
        for inv in eligible
        if inv.payment_date is not None and days_between(inv.payment_date, inv.due_date) <= 30
    )
    total_eligible = sum(inv.total_amount for inv in eligible)
    return round_half_up(collected_within_30 / total_eligible * 100)


def calculate_collection_rate(invoices: Sequence[Invoice]) -> int:
    total_amount = sum(inv.total_amount for inv in invoices)
    if total_amount <= 0:
        return 0
    total_collected = sum(inv.amount_collected for inv in invoices)
    return round_half_up(total_collected / total_amount * 100)


def calculate_kpis(
    invoices: Sequence[Invoice],
    params: GlobalParameters = DEFAULT_PARAMETERS,
    today: Optional[date] = None,
) -> KPISnapshot:
    """Main entry point: full KPI snapshot for an invoice set"""
    today = today or date.today()
    period_days = params.dso_period_days

    dso = calculate_dso(invoices, params.dso_method, period_days, today)
    best_possible = calculate_best_possible_dso(invoices, period_days)

    return KPISnapshot(
        dso=dso,
        best_possible_dso=best_possible,
        cei=calculate_cei(invoices),
        collection_rate=calculate_collection_rate(invoices),
        add=max(0, dso - best_possible),
        days30=calculate_30_days(invoices),
        total_invoices=len(invoices),
        total_amount=sum(inv.total_amount for inv in invoices),
        total_collected=sum(inv.amount_collected for inv in invoices),
        total_outstanding=sum(inv.total_balance for inv in invoices),
    )
