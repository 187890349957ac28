"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_tracker.api.main import create_app
from finance_tracker.domain.models import Account, Category, Credit
from finance_tracker.infrastructure.database.models import Base
from finance_tracker.infrastructure.database.repositories import AccountRepository, CategoryRepository
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.services.credits import CreditService


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
def other_db(db: Session) -> Generator[Session, None, None]:
    """Second connection to the same database, standing in for a concurrent request"""
    other = TestingSessionLocal()
    try:
        yield other
    finally:
        other.close()


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
def account(db: Session) -> Account:
    """Checking account to draw settlements from"""
    created = AccountRepository(db).create_account(
        Account(id="", name="Checking", type="bank", initial_balance_cents=5_000_000)
    )
    db.commit()
    return created


@pytest.fixture
def category(db: Session) -> Category:
    """Expense category for loan payments"""
    created = CategoryRepository(db).create_category(Category(id="", name="Loans", type="expense"))
    db.commit()
    return created


@pytest.fixture
def make_credit(db: Session) -> Callable[..., Credit]:
    """Factory for credits; defaults mirror a 15,000 MXN monthly car loan"""

    def _make(**overrides) -> Credit:
        fields = dict(
            name="Car loan",
            total_cents=1_500_000,
            interest_rate=12.5,
            monthly_payment_cents=250_000,
            start_date=date(2024, 1, 25),
            end_date=date(2024, 12, 25),
            next_payment_date=date(2024, 6, 25),
            frequency="monthly",
            remaining_cents=850_000,
        )
        fields.update(overrides)
        return CreditService(db).create_credit(**fields)

    return _make
