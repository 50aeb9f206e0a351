"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from collections_kpi.api.main import create_app
from collections_kpi.infrastructure.database.models import Base
from collections_kpi.infrastructure.database.session import get_db
from collections_kpi.domain.models import Invoice


TODAY = date(2025, 6, 15)

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_invoice() -> Callable[..., Invoice]:
    """Factory for invoices with sensible defaults; override any field by keyword"""
    counter = {"n": 0}

    def _make(**overrides) -> Invoice:
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            id=f"INV-{n}",
            invoice_number=f"{1000 + n}",
            customer_name="Acme",
            invoice_date=TODAY,
            due_date=TODAY,
            total_amount=1000.0,
            amount_collected=0.0,
            total_balance=1000.0,
            collector_name="Alice",
        )
        fields.update(overrides)
        return Invoice(**fields)

    return _make


@pytest.fixture
def sample_rows() -> list[dict]:
    """Raw rows as they come out of an exported receivables sheet"""
    return [
        {
            "Invoice Number": "A-1",
            "Customer": "Acme",
            "Invoice Date": "2025-05-01",
            "Due Date": "2025-05-31",
            "Payment Date": "2025-06-10",
            "Collector": "Alice",
            "Total Amount": "$1,000.00",
            "Collected": "1000",
            "Balance": "0",
            "MTD Overdue": 0,
        },
        {
            "Invoice Number": "A-2",
            "Customer": "Acme",
            "Invoice Date": "2025-06-01",
            "Due Date": "2025-07-01",
            "Payment Date": None,
            "Collector": "Alice",
            "Total Amount": "2,000",
            "Collected": "0",
            "Balance": "2,000",
            "MTD Overdue": 0,
        },
        {
            "Invoice Number": "B-1",
            "Customer": "Globex",
            "Invoice Date": "2025-03-15",
            "Due Date": "2025-04-14",
            "Payment Date": None,
            "Collector": "Bob",
            "Total Amount": "500",
            "Collected": "0",
            "Balance": "500",
            "MTD Overdue": 62,
        },
    ]


@pytest.fixture
def sample_mapping() -> dict:
    return {
        "invoice_number": "Invoice Number",
        "customer_name": "Customer",
        "invoice_date": "Invoice Date",
        "due_date": "Due Date",
        "payment_date": "Payment Date",
        "collector_name": "Collector",
        "total_amount": "Total Amount",
        "amount_collected": "Collected",
        "total_balance": "Balance",
    }
