"""SQLAlchemy ORM models for persisted settings"""

import uuid

from sqlalchemy import Column, DateTime, Float, String, Text, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class AppSetting(Base):
    """Keyed JSON settings blob (global parameters live under 'global_params')"""

    __tablename__ = "app_setting"

    key = Column(Text, primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class CollectorSalary(Base):
    """Base salary per collector, used for bonus calculation"""

    __tablename__ = "collector_salary"

    collector_name = Column(Text, primary_key=True)
    salary = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class BonusRuleRecord(Base):
    """Score tier for the tiered bonus policy"""

    __tablename__ = "bonus_rule"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False)
    min_score = Column(Float, nullable=False)
    percentage = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
