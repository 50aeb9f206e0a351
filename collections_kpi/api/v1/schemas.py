"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from collections_kpi.domain.parameters import BonusRule, GlobalParameters


class AnalyticsRequest(BaseModel):
    """Invoice rows plus the column mapping and window to analyse"""

    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Raw spreadsheet rows")
    mapping: Dict[str, str] = Field(..., description="Canonical field name -> column name")
    period: Literal["month", "quarter", "year", "all"] = "all"
    reference_date: Optional[date] = Field(None, description="Month the period window ends in (default: as_of)")
    as_of: Optional[date] = Field(None, description="'Today' for ages and date fallbacks")
    parameters: Optional[GlobalParameters] = Field(None, description="Overrides the stored parameters")
    fiscal_year: Optional[int] = Field(None, ge=1, le=9998, description="Filter to a fiscal year instead of `period`")
    fiscal_period: Literal["year", "h1", "h2", "q1", "q2", "q3", "q4", "current_month"] = "year"


class CollectorsRequest(AnalyticsRequest):
    bonus_policy: Literal["continuous", "tiered"] = "continuous"
    active_only: bool = Field(False, description="Skip collectors with zero outstanding balance")


class KPISnapshotSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class CollectorScorecard(BaseModel):
    """Single collector in the performance table"""

    model_config = ConfigDict(from_attributes=True)

    name: str
    salary: float
    kpis: KPISnapshotSchema
    sub_scores: Dict[str, float]
    score: float
    rating: str
    bonus: int
    target: float
    total_collected: float
    invoice_count: int
    customers_count: int


class CollectorsResponse(BaseModel):
    bonus_policy: str
    weights_total: float
    collectors: List[CollectorScorecard]


class CustomerRiskSchema(BaseModel):
    name: str
    total_exposure: float
    overdue_amount: float
    avg_delay: float
    risk_level: str
    collector_name: str
    customer_type: str
    invoice_count: int


class CustomerProfileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    total_invoiced: float
    total_collected: float
    total_outstanding: float
    overdue_amount: float
    avg_days_delinquent: float
    risk_level: str


class MonthlyStatsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    sales: float
    collected: float
    outstanding: float
    dso: int
    cei: int
    collection_rate: int


class MappingDetectRequest(BaseModel):
    columns: List[str] = Field(..., min_length=1)


class MappingDetectResponse(BaseModel):
    mapping: Dict[str, str]
    missing_required: List[str]


class SpreadsheetUploadResponse(MappingDetectResponse):
    """Parsed sheet plus the suggested mapping"""

    filename: str
    columns: List[str]
    rows: List[Dict[str, Any]]


class SalaryItem(BaseModel):
    collector_name: str = Field(..., min_length=1)
    salary: float = Field(..., ge=0)


class SalariesPayload(BaseModel):
    salaries: List[SalaryItem]


class BonusRulesPayload(BaseModel):
    rules: List[BonusRule]
