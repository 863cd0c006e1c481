"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LLM_API_KEY", "")

import pytest
from datetime import date
from typing import Generator, Optional
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

from budget_insights.api.dependencies import get_clock, get_completion_client
from budget_insights.api.main import create_app
from budget_insights.domain.exceptions import GenerativeCallFailure
from budget_insights.infrastructure.database.models import Base
from budget_insights.infrastructure.database.repositories import RecordStore
from budget_insights.infrastructure.database.session import build_engine, get_db


# Tuesday; the week runs Mon 2026-10-19 .. Sun 2026-10-25, October has 31 days
TODAY = date(2026, 10, 20)
USER = "user_1"

TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Seeder:
    """Writes fixture records through the same store the engine reads from"""

    def __init__(self, store: RecordStore, user_id: str = USER):
        self.store = store
        self.user_id = user_id

    def budget(self, total: float, day: date = TODAY) -> dict:
        row = self.store.create(
            "monthly_budget",
            {"user_id": self.user_id, "year": day.year, "month": day.month, "total_budget": total},
        )
        self.store.commit()
        return row

    def category(self, name: str, type: str = "fixed", fixed_amount: Optional[float] = None, percentage: Optional[float] = None) -> str:
        row = self.store.create(
            "category",
            {
                "user_id": self.user_id,
                "name": name,
                "type": type,
                "fixed_amount": fixed_amount,
                "percentage": percentage,
                "is_active": True,
            },
        )
        self.store.commit()
        return row["id"]

    def expense(self, amount: float, day: date, category_id: Optional[str] = None) -> str:
        row = self.store.create(
            "expense",
            {"user_id": self.user_id, "amount": amount, "date": day, "category_id": category_id, "description": "Test"},
        )
        self.store.commit()
        return row["id"]

    def bank(self, amount: float, day: date, category_id: Optional[str] = None, transaction_type: str = "expense") -> str:
        row = self.store.create(
            "bank_transaction",
            {
                "user_id": self.user_id,
                "amount": amount,
                "booking_date": day,
                "category_id": category_id,
                "transaction_type": transaction_type,
                "description": "Card payment",
            },
        )
        self.store.commit()
        return row["id"]


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
def store(db: Session) -> RecordStore:
    return RecordStore(db)


@pytest.fixture
def seed(store: RecordStore) -> Seeder:
    return Seeder(store)


@pytest.fixture
def completion() -> AsyncMock:
    """Completion client that is down unless a test sets a return value"""
    client = AsyncMock()
    client.complete.side_effect = GenerativeCallFailure("network", "connection refused")
    return client


@pytest.fixture
def client(db: Session, completion: AsyncMock) -> TestClient:
    """Create FastAPI test client with test database, fixed clock and fake completion"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: TODAY)
    app.dependency_overrides[get_completion_client] = lambda: completion
    return TestClient(app)
