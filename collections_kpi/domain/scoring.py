"""Collector scoring engine - weighted KPI scorecards, ratings and bonuses"""

from datetime import date
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from collections_kpi.domain.kpis import calculate_kpis
from collections_kpi.domain.models import CollectorPerformance, Invoice, KPISnapshot
from collections_kpi.domain.parameters import DEFAULT_PARAMETERS, BonusRule, GlobalParameters
from collections_kpi.utils.rounding import round_half_up, round_to_tenth

DEFAULT_SALARY = 10_000.0
UNASSIGNED = "Unassigned"

# (minimum composite score, rating), evaluated highest first
RATING_THRESHOLDS = (
    (96.0, "Outstanding"),
    (86.0, "Excellent"),
    (75.0, "Good"),
)
LOWEST_RATING = "Poor"


def score_ratio_kpi(actual: float, target: float) -> float:
    """Higher-is-better KPI: min(actual / target, 1) * 100. Exceeding target earns no extra."""
    if target <= 0:
        return 100.0
    return max(0.0, min(actual / target, 1.0)) * 100


def score_inverse_kpi(actual: float, target: float) -> float:
    """Lower-is-better KPI (DSO, ADD): 100 at or under target, target / actual * 100 above it"""
    if actual <= target:
        return 100.0
    return max(0.0, min(target / actual * 100, 100.0))


def calculate_sub_scores(kpis: KPISnapshot, params: GlobalParameters) -> Dict[str, float]:
    """Normalize each scored KPI against its target onto 0-100"""
    return {
        "collected": score_ratio_kpi(kpis.collection_rate, params.collected_target.target),
        "dso": score_inverse_kpi(kpis.dso, params.dso.target),
        "cei": score_ratio_kpi(kpis.cei, params.cei.target),
        "add": score_inverse_kpi(kpis.add, params.add.target),
        "days30": score_ratio_kpi(kpis.days30, params.days30.target),
    }


def calculate_composite_score(sub_scores: Mapping[str, float], params: GlobalParameters) -> float:
    """
    Weighted sum of sub-scores, rounded to one decimal.

    With weights summing to 100 the result is a convex combination of the
    sub-scores and so stays within 0-100.
    """
    weights = {
        "collected": params.collected_target.weight,
        "dso": params.dso.weight,
        "cei": params.cei.weight,
        "add": params.add.weight,
        "days30": params.days30.weight,
    }
    score = sum(weights[name] / 100 * sub_scores[name] for name in weights)
    return round_to_tenth(score)


def determine_rating(score: float) -> str:
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return LOWEST_RATING


class BonusPolicy(Protocol):
    def calculate(self, salary: float, collection_rate: float, score: float) -> int:
        ...


class ContinuousBonusPolicy:
    """
    Bonus proportional to the collection rate:
    salary * max_bonus_percent / 100 * min(collection_rate / 100, 1)
    """

    def __init__(self, max_bonus_percent: float):
        self.max_bonus_percent = max_bonus_percent

    def calculate(self, salary: float, collection_rate: float, score: float) -> int:
        ratio = max(0.0, min(collection_rate / 100, 1.0))
        return round_half_up(salary * (self.max_bonus_percent / 100) * ratio)


class TieredBonusPolicy:
    """Bonus from the highest score tier reached: salary * tier percentage / 100"""

    def __init__(self, rules: Sequence[BonusRule]):
        self.rules = sorted(rules, key=lambda r: r.min_score, reverse=True)

    def calculate(self, salary: float, collection_rate: float, score: float) -> int:
        for rule in self.rules:
            if score >= rule.min_score:
                return round_half_up(salary * rule.percentage / 100)
        return 0


def group_by_collector(invoices: Sequence[Invoice]) -> Dict[str, List[Invoice]]:
    """Group preserving first-appearance order of collectors"""
    grouped: Dict[str, List[Invoice]] = {}
    for inv in invoices:
        grouped.setdefault(inv.collector_name or UNASSIGNED, []).append(inv)
    return grouped


def filter_active_collectors(invoices: Sequence[Invoice]) -> List[Invoice]:
    """Drop invoices of collectors whose combined outstanding balance is zero"""
    balances: Dict[str, float] = {}
    for inv in invoices:
        name = inv.collector_name or UNASSIGNED
        balances[name] = balances.get(name, 0.0) + inv.total_balance
    return [inv for inv in invoices if balances[inv.collector_name or UNASSIGNED] != 0]


def calculate_collector_performance(
    invoices: Sequence[Invoice],
    params: GlobalParameters = DEFAULT_PARAMETERS,
    salaries: Optional[Mapping[str, float]] = None,
    bonus_policy: Optional[BonusPolicy] = None,
    default_salary: float = DEFAULT_SALARY,
    today: Optional[date] = None,
) -> List[CollectorPerformance]:
    """
    Main entry point: one scorecard per collector.

    Flow:
    1. Group invoices by collector
    2. KPI snapshot per collector
    3. Sub-score each KPI against its target, weight into a composite score
    4. Map score to a rating and compute the bonus with `bonus_policy`
       (continuous policy from `params.max_bonus_percent` when not given)
    """
    today = today or date.today()
    salaries = salaries or {}
    bonus_policy = bonus_policy or ContinuousBonusPolicy(params.max_bonus_percent)

    performances = []
    for name, collector_invoices in group_by_collector(invoices).items():
        kpis = calculate_kpis(collector_invoices, params, today)
        sub_scores = calculate_sub_scores(kpis, params)
        score = calculate_composite_score(sub_scores, params)
        salary = salaries.get(name, default_salary)

        performances.append(
            CollectorPerformance(
                name=name,
                salary=salary,
                kpis=kpis,
                sub_scores=MappingProxyType(sub_scores),
                score=score,
                rating=determine_rating(score),
                bonus=bonus_policy.calculate(salary, kpis.collection_rate, score),
                target=kpis.total_amount * params.collected_target.target / 100,
                invoice_count=kpis.total_invoices,
                customers_count=len({inv.customer_name for inv in collector_invoices}),
                invoices=tuple(collector_invoices),
            )
        )

    return performances
