"""Global scoring parameters shared by every analytics call"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from collections_kpi.domain.exceptions import InvalidParametersError


class DSOMethod(str, Enum):
    WEIGHTED = "weighted"
    SIMPLE = "simple"
    TRADITIONAL = "traditional"
    COUNTBACK = "countback"
    BEST_POSSIBLE = "bestPossible"


class DateBasis(str, Enum):
    """Which invoice date drives period filtering and trend bucketing"""

    INVOICE_DATE = "invoiceDate"
    DUE_DATE = "dueDate"


class KPITarget(BaseModel):
    """Target value and percentage weight for one scored KPI"""

    model_config = ConfigDict(frozen=True)

    target: float = Field(..., ge=0, description="Percent for ratio KPIs, days for DSO/ADD")
    weight: float = Field(..., ge=0, le=100, description="Share of the composite score (0-100)")


class BonusRule(BaseModel):
    """Score tier for the tiered bonus policy"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    min_score: float = Field(..., ge=0, le=100)
    percentage: float = Field(..., ge=0, le=100)


class GlobalParameters(BaseModel):
    """
    Scoring configuration.

    Weights across the five KPI targets are expected to add up to 100. That is
    not enforced here; `weights_total` lets callers check it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    dso_method: DSOMethod = DSOMethod.WEIGHTED
    date_basis: DateBasis = DateBasis.INVOICE_DATE
    fiscal_year_start_month: int = Field(1, ge=1, le=12)
    dso_period_days: int = Field(30, gt=0)

    collected_target: KPITarget = KPITarget(target=85, weight=30)
    dso: KPITarget = KPITarget(target=45, weight=20)
    cei: KPITarget = KPITarget(target=80, weight=20)
    add: KPITarget = KPITarget(target=10, weight=15)
    days30: KPITarget = KPITarget(target=70, weight=15)

    max_bonus_percent: float = Field(20, ge=0)

    @property
    def weights_total(self) -> float:
        return (
            self.collected_target.weight
            + self.dso.weight
            + self.cei.weight
            + self.add.weight
            + self.days30.weight
        )


DEFAULT_PARAMETERS = GlobalParameters()

DEFAULT_BONUS_RULES = (
    BonusRule(name="Standard Bonus", min_score=35, percentage=2.5),
    BonusRule(name="High Performance", min_score=40, percentage=5.0),
    BonusRule(name="Elite Bonus", min_score=45, percentage=7.5),
)


def merge_with_defaults(saved: Optional[Mapping[str, Any]]) -> GlobalParameters:
    """
    Build parameters from a persisted payload, filling any keys it lacks from
    the defaults so older saves keep loading after new settings are added.
    """
    merged: Dict[str, Any] = DEFAULT_PARAMETERS.model_dump(mode="json")
    if saved:
        merged.update(saved)
    try:
        return GlobalParameters.model_validate(merged)
    except ValidationError as e:
        raise InvalidParametersError(f"Invalid saved parameters: {e}") from e


def update_parameters(current: GlobalParameters, changes: Mapping[str, Any]) -> GlobalParameters:
    """Return a validated copy of `current` with `changes` applied (top-level keys replace)"""
    payload = current.model_dump(mode="json")
    payload.update(changes)
    try:
        return GlobalParameters.model_validate(payload)
    except ValidationError as e:
        raise InvalidParametersError(f"Invalid parameter update: {e}") from e
