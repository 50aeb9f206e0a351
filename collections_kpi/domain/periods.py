"""Period windows and fiscal calendar helpers for invoice filtering"""

from datetime import date
from typing import List, Optional, Sequence, Tuple, Union

from collections_kpi.domain.exceptions import UnknownPeriodError
from collections_kpi.domain.models import Invoice
from collections_kpi.domain.parameters import DateBasis
from collections_kpi.utils.date_utils import add_months, end_of_month, start_of_month

PERIODS = ("month", "quarter", "year", "all")

# Months preceding the reference month that each window also covers
_LOOKBACK_MONTHS = {"month": 0, "quarter": 2, "year": 11}


def basis_date(invoice: Invoice, basis: Union[DateBasis, str]) -> date:
    """Invoice date or due date, per the configured basis"""
    if DateBasis(basis) is DateBasis.DUE_DATE:
        return invoice.due_date
    return invoice.invoice_date


def period_window(period: str, reference_date: Optional[date] = None) -> Tuple[date, date]:
    """
    Inclusive window ending at the end of the reference month.

    month   -> the reference month
    quarter -> reference month and the two before it
    year    -> reference month and the eleven before it
    """
    if period not in _LOOKBACK_MONTHS:
        raise UnknownPeriodError(f"Unsupported period: {period!r}")
    reference_date = reference_date or date.today()
    end = end_of_month(reference_date)
    start = add_months(start_of_month(reference_date), -_LOOKBACK_MONTHS[period])
    return start, end


def filter_invoices_by_range(
    invoices: Sequence[Invoice],
    start: date,
    end: date,
    basis: Union[DateBasis, str] = DateBasis.INVOICE_DATE,
) -> List[Invoice]:
    return [inv for inv in invoices if start <= basis_date(inv, basis) <= end]


def filter_invoices_by_period(
    invoices: Sequence[Invoice],
    period: str = "all",
    basis: Union[DateBasis, str] = DateBasis.INVOICE_DATE,
    reference_date: Optional[date] = None,
) -> List[Invoice]:
    """Keep invoices whose basis date falls in the period window; 'all' keeps everything"""
    if period not in PERIODS:
        raise UnknownPeriodError(f"Unsupported period: {period!r}")
    if period == "all":
        return list(invoices)
    start, end = period_window(period, reference_date)
    return filter_invoices_by_range(invoices, start, end, basis)


# --- Fiscal calendar -------------------------------------------------------


def start_month_index(fiscal_start: Union[int, str]) -> int:
    """
    0-based month index for a fiscal year start given as a 1-based month
    number or an "MM-DD" string ("04-01" -> 3). Unparseable input is January.
    """
    if isinstance(fiscal_start, int):
        return (fiscal_start - 1) % 12
    try:
        month = int(str(fiscal_start).split("-")[0])
    except ValueError:
        return 0
    return (month - 1) % 12


def get_fiscal_year(day: date, start_month: int) -> int:
    """Fiscal year label: the calendar year in which that fiscal year starts"""
    if start_month == 0:
        return day.year
    # Mar 2025 with an April start belongs to FY2024
    if day.month - 1 < start_month:
        return day.year - 1
    return day.year


def get_fiscal_quarter(day: date, start_month: int) -> int:
    shifted = (day.month - 1 - start_month) % 12
    return shifted // 3 + 1


def get_fiscal_period_range(
    fiscal_year: int,
    period: str,
    start_month: int,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Date range for a fiscal period: year, h1, h2, q1-q4 or current_month.
    Anything else resolves to the full fiscal year.
    """
    fy_start = date(fiscal_year, start_month + 1, 1)

    if period == "h1":
        return fy_start, end_of_month(add_months(fy_start, 5))
    if period == "h2":
        return add_months(fy_start, 6), end_of_month(add_months(fy_start, 11))
    if period in ("q1", "q2", "q3", "q4"):
        q_start = add_months(fy_start, (int(period[1]) - 1) * 3)
        return q_start, end_of_month(add_months(q_start, 2))
    if period == "current_month":
        today = today or date.today()
        return start_of_month(today), end_of_month(today)

    return fy_start, end_of_month(add_months(fy_start, 11))


def filter_invoices_by_fiscal_period(
    invoices: Sequence[Invoice],
    fiscal_year: int,
    period: str,
    start_month: int,
    basis: Union[DateBasis, str] = DateBasis.INVOICE_DATE,
    today: Optional[date] = None,
) -> List[Invoice]:
    start, end = get_fiscal_period_range(fiscal_year, period, start_month, today)
    return filter_invoices_by_range(invoices, start, end, basis)
