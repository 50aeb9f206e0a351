"""Data access layer for persisted parameters, salaries and bonus rules"""

import logging
from typing import Dict, List, Sequence

from sqlalchemy.orm import Session

from collections_kpi.domain.parameters import (
    DEFAULT_BONUS_RULES,
    BonusRule,
    GlobalParameters,
    merge_with_defaults,
)
from collections_kpi.infrastructure.database.models import AppSetting, BonusRuleRecord, CollectorSalary

logger = logging.getLogger(__name__)

GLOBAL_PARAMS_KEY = "global_params"


class ParametersRepository:
    """Repository for global scoring parameters"""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> GlobalParameters:
        """Saved parameters merged over defaults (defaults when nothing is saved)"""
        record = self.db.get(AppSetting, GLOBAL_PARAMS_KEY)
        return merge_with_defaults(record.value if record else None)

    def save(self, params: GlobalParameters) -> GlobalParameters:
        """Persist the full parameter set"""
        payload = params.model_dump(mode="json")
        record = self.db.get(AppSetting, GLOBAL_PARAMS_KEY)
        if record is None:
            self.db.add(AppSetting(key=GLOBAL_PARAMS_KEY, value=payload))
        else:
            record.value = payload
        self.db.flush()
        return params


class SalaryRepository:
    """Repository for collector salaries"""

    def __init__(self, db: Session):
        self.db = db

    def get_salaries(self) -> Dict[str, float]:
        return {row.collector_name: row.salary for row in self.db.query(CollectorSalary).all()}

    def set_salary(self, collector_name: str, salary: float) -> None:
        record = self.db.get(CollectorSalary, collector_name)
        if record is None:
            self.db.add(CollectorSalary(collector_name=collector_name, salary=salary))
        else:
            record.salary = salary
        self.db.flush()


class BonusRuleRepository:
    """Repository for tiered bonus rules"""

    def __init__(self, db: Session):
        self.db = db

    def list_rules(self) -> List[BonusRule]:
        """Stored rules by ascending minimum score; seeds the default tiers on first use"""
        records = self.db.query(BonusRuleRecord).order_by(BonusRuleRecord.min_score).all()
        if not records:
            logger.info("Seeding default bonus rules")
            return self.replace_rules(DEFAULT_BONUS_RULES)
        return [
            BonusRule(name=r.name, min_score=r.min_score, percentage=r.percentage)
            for r in records
        ]

    def replace_rules(self, rules: Sequence[BonusRule]) -> List[BonusRule]:
        self.db.query(BonusRuleRecord).delete()
        for rule in rules:
            self.db.add(
                BonusRuleRecord(name=rule.name, min_score=rule.min_score, percentage=rule.percentage)
            )
        self.db.flush()
        return sorted(rules, key=lambda r: r.min_score)
