"""Domain models - pure Python dataclasses representing receivables entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class Invoice:
    """Normalized accounts-receivable invoice"""

    id: str
    invoice_number: str
    customer_name: str
    invoice_date: date
    due_date: date
    total_amount: float
    amount_collected: float = 0.0
    total_balance: float = 0.0
    customer_type: str = "Commercial"
    collector_name: str = "Unassigned"
    salesperson: Optional[str] = None
    payment_terms: str = ""
    status: str = "Open"
    business_case: Optional[str] = None
    expected_date: Optional[date] = None
    payment_date: Optional[date] = None
    opening_balance: Optional[float] = None  # AR carried over from a prior period
    credit_note: Optional[float] = None
    mtd_overdue: float = 0.0  # > 0 flags the invoice as currently overdue

    @property
    def is_overdue(self) -> bool:
        return self.mtd_overdue > 0


@dataclass(frozen=True)
class KPISnapshot:
    """Collections KPIs for one invoice set"""

    dso: int
    best_possible_dso: int
    cei: int
    collection_rate: int
    add: int
    days30: int
    total_invoices: int
    total_amount: float
    total_collected: float
    total_outstanding: float


@dataclass(frozen=True)
class CollectorPerformance:
    """Scorecard for one collector"""

    name: str
    salary: float
    kpis: KPISnapshot
    sub_scores: Mapping[str, float] = field(hash=False)  # read-only view
    score: float
    rating: str  # Outstanding | Excellent | Good | Poor
    bonus: int
    target: float  # amount expected to be collected at the configured rate
    invoice_count: int
    customers_count: int
    invoices: Tuple[Invoice, ...] = field(repr=False)

    @property
    def total_collected(self) -> float:
        return self.kpis.total_collected


@dataclass(frozen=True)
class CustomerRisk:
    """Exposure and risk tier for one customer"""

    name: str
    total_exposure: float
    overdue_amount: float
    avg_delay: float
    risk_level: str  # Low | Medium | High
    collector_name: str
    customer_type: str
    invoices: Tuple[Invoice, ...] = field(repr=False)


@dataclass(frozen=True)
class CustomerProfile:
    """Customer summary for account review screens"""

    id: str
    name: str
    total_invoiced: float
    total_collected: float
    total_outstanding: float
    overdue_amount: float
    avg_days_delinquent: float
    risk_level: str
    invoices: Tuple[Invoice, ...] = field(repr=False)


@dataclass(frozen=True)
class MonthlyStats:
    """KPI trend point for one calendar month"""

    month: str  # YYYY-MM
    sales: float
    collected: float
    outstanding: float
    dso: int
    cei: int
    collection_rate: int
