"""Customer risk classification from exposure and delinquency"""

import base64
from typing import Dict, List, Sequence

from collections_kpi.domain.models import CustomerProfile, CustomerRisk, Invoice


def classify_risk(avg_delay: float, overdue_amount: float, total_exposure: float) -> str:
    """
    Risk tiers:
    - High:   average delay > 60 days or more than half the exposure overdue
    - Medium: average delay > 30 days or more than a fifth overdue
    - Low:    otherwise

    Zero exposure has an overdue ratio of 0.
    """
    overdue_ratio = overdue_amount / total_exposure if total_exposure != 0 else 0.0
    if avg_delay > 60 or overdue_ratio > 0.5:
        return "High"
    if avg_delay > 30 or overdue_ratio > 0.2:
        return "Medium"
    return "Low"


def calculate_customer_risk(invoices: Sequence[Invoice]) -> List[CustomerRisk]:
    """One risk row per customer, largest exposure first"""
    grouped: Dict[str, List[Invoice]] = {}
    for inv in invoices:
        grouped.setdefault(inv.customer_name or "Unknown", []).append(inv)

    risks = []
    for name, customer_invoices in grouped.items():
        total_exposure = sum(inv.total_balance for inv in customer_invoices)
        overdue = [inv for inv in customer_invoices if inv.is_overdue]
        overdue_amount = sum(inv.total_balance for inv in overdue)
        avg_delay = sum(inv.mtd_overdue for inv in overdue) / len(overdue) if overdue else 0.0

        first = customer_invoices[0]
        risks.append(
            CustomerRisk(
                name=name,
                total_exposure=total_exposure,
                overdue_amount=overdue_amount,
                avg_delay=avg_delay,
                risk_level=classify_risk(avg_delay, overdue_amount, total_exposure),
                collector_name=first.collector_name or "Unassigned",
                customer_type=first.customer_type or "Commercial",
                invoices=tuple(customer_invoices),
            )
        )

    return sorted(risks, key=lambda r: r.total_exposure, reverse=True)


def build_customer_profiles(invoices: Sequence[Invoice]) -> List[CustomerProfile]:
    """Customer summaries derived from the risk rows, same ordering"""
    profiles = []
    for risk in calculate_customer_risk(invoices):
        collected = sum(inv.amount_collected for inv in risk.invoices)
        profiles.append(
            CustomerProfile(
                id=base64.b64encode(risk.name.encode("utf-8")).decode("ascii"),
                name=risk.name,
                total_invoiced=risk.total_exposure + collected,
                total_collected=collected,
                total_outstanding=risk.total_exposure,
                overdue_amount=risk.overdue_amount,
                avg_days_delinquent=risk.avg_delay,
                risk_level=risk.risk_level,
                invoices=risk.invoices,
            )
        )
    return profiles
