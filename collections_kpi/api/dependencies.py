"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from collections_kpi.domain.exceptions import InvalidParametersError
from collections_kpi.domain.parameters import GlobalParameters
from collections_kpi.infrastructure.database.repositories import ParametersRepository
from collections_kpi.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_stored_parameters(db: Session = Depends(get_db)) -> GlobalParameters:
    """Persisted parameters merged over defaults"""
    try:
        return ParametersRepository(db).load()
    except InvalidParametersError as e:
        raise HTTPException(status_code=500, detail="Stored parameters are invalid") from e


def resolve_today(as_of: Optional[date]) -> date:
    return as_of or date.today()
