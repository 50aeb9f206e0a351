"""POST /v1/analytics/* - KPI, scorecard, risk and trend computations"""

import time
from datetime import date
from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from collections_kpi.api.dependencies import get_request_id, get_stored_parameters, resolve_today
from collections_kpi.api.v1.schemas import (
    AnalyticsRequest,
    CollectorScorecard,
    CollectorsRequest,
    CollectorsResponse,
    CustomerProfileSchema,
    CustomerRiskSchema,
    KPISnapshotSchema,
    MonthlyStatsSchema,
)
from collections_kpi.config import settings
from collections_kpi.domain.kpis import calculate_kpis
from collections_kpi.domain.models import Invoice
from collections_kpi.domain.normalizer import missing_required_fields, normalize_rows
from collections_kpi.domain.parameters import GlobalParameters
from collections_kpi.domain.periods import (
    filter_invoices_by_fiscal_period,
    filter_invoices_by_period,
    start_month_index,
)
from collections_kpi.domain.risk import build_customer_profiles, calculate_customer_risk
from collections_kpi.domain.scoring import (
    ContinuousBonusPolicy,
    TieredBonusPolicy,
    calculate_collector_performance,
    filter_active_collectors,
)
from collections_kpi.domain.trends import calculate_monthly_stats
from collections_kpi.infrastructure.database.repositories import BonusRuleRepository, SalaryRepository
from collections_kpi.infrastructure.database.session import get_db
from collections_kpi.infrastructure.observability.logging import log_computation
from collections_kpi.infrastructure.observability.metrics import record_computation, record_scorecards

router = APIRouter()


def _prepare(
    body: AnalyticsRequest,
    stored: GlobalParameters,
) -> Tuple[GlobalParameters, List[Invoice], date]:
    """
    Shared request flow:
    1. Reject mappings without the required columns
    2. Normalize rows into invoices
    3. Apply the fiscal period when a fiscal year is given, else the
       period window, on the configured date basis
    """
    missing = missing_required_fields(body.mapping)
    if missing:
        raise HTTPException(status_code=422, detail=f"Mapping is missing required fields: {', '.join(missing)}")

    params = body.parameters or stored
    today = resolve_today(body.as_of)
    invoices = normalize_rows(body.rows, body.mapping, today)
    if body.fiscal_year is not None:
        invoices = filter_invoices_by_fiscal_period(
            invoices,
            body.fiscal_year,
            body.fiscal_period,
            start_month_index(params.fiscal_year_start_month),
            params.date_basis,
            today,
        )
    else:
        invoices = filter_invoices_by_period(
            invoices,
            body.period,
            params.date_basis,
            body.reference_date or today,
        )
    return params, invoices, today


def _observe(operation: str, request_id: str, invoice_count: int, result_count: int, start_time: float) -> None:
    duration = time.time() - start_time
    record_computation(operation, invoice_count, duration)
    log_computation(request_id, operation, invoice_count, result_count, duration * 1000)


@router.post("/analytics/kpis", response_model=KPISnapshotSchema)
def compute_kpis(
    body: AnalyticsRequest,
    request: Request,
    stored: GlobalParameters = Depends(get_stored_parameters),
):
    """KPI snapshot for the whole (filtered) invoice set"""
    start_time = time.time()
    params, invoices, today = _prepare(body, stored)

    kpis = calculate_kpis(invoices, params, today)

    _observe("kpis", get_request_id(request), len(invoices), 1, start_time)
    return KPISnapshotSchema.model_validate(kpis)


@router.post("/analytics/collectors", response_model=CollectorsResponse)
def compute_collectors(
    body: CollectorsRequest,
    request: Request,
    db: Session = Depends(get_db),
    stored: GlobalParameters = Depends(get_stored_parameters),
):
    """
    Collector scorecards.

    Salaries come from the salary table (default salary otherwise). The bonus
    uses the continuous policy unless `bonus_policy` is "tiered", which applies
    the stored score tiers instead.
    """
    start_time = time.time()
    params, invoices, today = _prepare(body, stored)
    if body.active_only:
        invoices = filter_active_collectors(invoices)

    if body.bonus_policy == "tiered":
        policy = TieredBonusPolicy(BonusRuleRepository(db).list_rules())
        db.commit()  # keep seeded default tiers
    else:
        policy = ContinuousBonusPolicy(params.max_bonus_percent)

    performances = calculate_collector_performance(
        invoices,
        params,
        salaries=SalaryRepository(db).get_salaries(),
        bonus_policy=policy,
        default_salary=settings.default_salary,
        today=today,
    )

    record_scorecards(performances)
    _observe("collectors", get_request_id(request), len(invoices), len(performances), start_time)
    return CollectorsResponse(
        bonus_policy=body.bonus_policy,
        weights_total=params.weights_total,
        collectors=[CollectorScorecard.model_validate(p) for p in performances],
    )


@router.post("/analytics/customers", response_model=List[CustomerRiskSchema])
def compute_customer_risk(
    body: AnalyticsRequest,
    request: Request,
    stored: GlobalParameters = Depends(get_stored_parameters),
):
    """Customer risk tiers, largest exposure first"""
    start_time = time.time()
    _, invoices, _ = _prepare(body, stored)

    risks = calculate_customer_risk(invoices)

    _observe("customers", get_request_id(request), len(invoices), len(risks), start_time)
    return [
        CustomerRiskSchema(
            name=r.name,
            total_exposure=r.total_exposure,
            overdue_amount=r.overdue_amount,
            avg_delay=r.avg_delay,
            risk_level=r.risk_level,
            collector_name=r.collector_name,
            customer_type=r.customer_type,
            invoice_count=len(r.invoices),
        )
        for r in risks
    ]


@router.post("/analytics/customer-profiles", response_model=List[CustomerProfileSchema])
def compute_customer_profiles(
    body: AnalyticsRequest,
    request: Request,
    stored: GlobalParameters = Depends(get_stored_parameters),
):
    """Per-customer account summaries, same order as the risk table"""
    start_time = time.time()
    _, invoices, _ = _prepare(body, stored)

    profiles = build_customer_profiles(invoices)

    _observe("customer_profiles", get_request_id(request), len(invoices), len(profiles), start_time)
    return [CustomerProfileSchema.model_validate(p) for p in profiles]


@router.post("/analytics/trends", response_model=List[MonthlyStatsSchema])
def compute_trends(
    body: AnalyticsRequest,
    request: Request,
    stored: GlobalParameters = Depends(get_stored_parameters),
):
    """Monthly KPI series on the configured date basis"""
    start_time = time.time()
    params, invoices, today = _prepare(body, stored)

    stats = calculate_monthly_stats(invoices, params, today)

    _observe("trends", get_request_id(request), len(invoices), len(stats), start_time)
    return [MonthlyStatsSchema.model_validate(s) for s in stats]
