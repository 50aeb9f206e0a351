"""GET/PUT /v1/parameters, /v1/salaries, /v1/bonus-rules - Persisted scoring settings"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from collections_kpi.api.dependencies import get_request_id, get_stored_parameters
from collections_kpi.api.v1.schemas import BonusRulesPayload, SalariesPayload, SalaryItem
from collections_kpi.domain.exceptions import InvalidParametersError
from collections_kpi.domain.parameters import GlobalParameters, update_parameters
from collections_kpi.infrastructure.database.repositories import (
    BonusRuleRepository,
    ParametersRepository,
    SalaryRepository,
)
from collections_kpi.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/parameters", response_model=GlobalParameters)
def get_parameters(params: GlobalParameters = Depends(get_stored_parameters)):
    return params


@router.put("/parameters", response_model=GlobalParameters)
def put_parameters(
    request: Request,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """
    Apply a partial update to the stored parameters and persist the result.

    Top-level keys replace their current values; KPI targets must be given
    as complete {target, weight} pairs.
    """
    request_id = get_request_id(request)
    repo = ParametersRepository(db)
    try:
        updated = update_parameters(repo.load(), changes)
        repo.save(updated)
        db.commit()
    except InvalidParametersError as e:
        db.rollback()
        logging.warning(f"Rejected parameter update: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    if updated.weights_total != 100:
        logging.warning(
            "KPI weights do not sum to 100",
            extra={"request_id": request_id, "weights_total": updated.weights_total},
        )
    return updated


@router.get("/salaries", response_model=SalariesPayload)
def get_salaries(db: Session = Depends(get_db)):
    salaries = SalaryRepository(db).get_salaries()
    return SalariesPayload(
        salaries=[SalaryItem(collector_name=name, salary=salary) for name, salary in sorted(salaries.items())]
    )


@router.put("/salaries", response_model=SalariesPayload)
def put_salaries(payload: SalariesPayload, db: Session = Depends(get_db)):
    """Upsert salaries; collectors not listed keep their stored value"""
    repo = SalaryRepository(db)
    for item in payload.salaries:
        repo.set_salary(item.collector_name, item.salary)
    db.commit()
    return get_salaries(db)


@router.get("/bonus-rules", response_model=BonusRulesPayload)
def get_bonus_rules(db: Session = Depends(get_db)):
    rules = BonusRuleRepository(db).list_rules()
    db.commit()
    return BonusRulesPayload(rules=rules)


@router.put("/bonus-rules", response_model=BonusRulesPayload)
def put_bonus_rules(payload: BonusRulesPayload, db: Session = Depends(get_db)):
    """Replace the whole tier table"""
    rules = BonusRuleRepository(db).replace_rules(payload.rules)
    db.commit()
    return BonusRulesPayload(rules=rules)
