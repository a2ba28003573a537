"""Pytest fixtures for testing"""

import calendar
import pytest
from datetime import datetime
from decimal import Decimal
from typing import Callable, Generator, List
from zoneinfo import ZoneInfo
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from billing_core.api.main import create_app
from billing_core.api.dependencies import get_now
from billing_core.infrastructure.database.models import Base
from billing_core.infrastructure.database.session import get_db
from billing_core.domain.models import LineItem, MonetaryRecord, PaymentStatus, RecordKind
from billing_core.domain.periods import CalendarConfig
from billing_core.domain.records import new_record


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

MANILA = ZoneInfo("Asia/Manila")

# Wednesday afternoon; the surrounding Sunday-first week is Jan 7 - Jan 13
NOW = datetime(2024, 1, 10, 14, 30, tzinfo=MANILA)


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
    """Create FastAPI test client with test database and a fixed clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    return TestClient(app, headers={"X-User-ID": "owner_1"})


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def cal() -> CalendarConfig:
    """Sunday-first weeks in Manila time, as configured by default"""
    return CalendarConfig(week_start=calendar.SUNDAY, timezone="Asia/Manila")


@pytest.fixture
def make_job_order() -> Callable[..., MonetaryRecord]:
    """Factory for job orders: items are (description, quantity, amount, status) tuples"""
    counter = {"n": 0}

    def _make(client_name="Acme Printing", items=None, start_date=NOW, paid_amount="0", **kwargs) -> MonetaryRecord:
        counter["n"] += 1
        if items is None:
            items = [("Tarpaulin 3x5", "2", "450", PaymentStatus.UNPAID)]
        return new_record(
            kind=RecordKind.JOB_ORDER,
            number=f"JO-{start_date:%Y%m%d}-{counter['n']:04d}",
            client_name=client_name,
            items=[
                LineItem(description=d, quantity=Decimal(q), unit_amount=Decimal(a), status=s)
                for d, q, a, s in items
            ],
            start_date=start_date,
            paid_amount=Decimal(paid_amount),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_records(make_job_order) -> List[MonetaryRecord]:
    """A small week of job orders across statuses"""
    return [
        make_job_order(
            client_name="Acme Printing",
            items=[("Calling cards", "1", "2650", PaymentStatus.UNPAID)],
            paid_amount="1000",
            start_date=datetime(2024, 1, 10, 9, 0, tzinfo=MANILA),
        ),
        make_job_order(
            client_name="Bayside Cafe",
            items=[
                ("Menu boards", "2", "500", PaymentStatus.PAID),
                ("Stickers", "100", "5", PaymentStatus.PAID),
            ],
            paid_amount="1500",
            start_date=datetime(2024, 1, 8, 16, 0, tzinfo=MANILA),
        ),
        make_job_order(
            client_name="Acme Printing",
            items=[("Flyers", "500", "2", PaymentStatus.UNPAID)],
            start_date=datetime(2023, 12, 28, 10, 0, tzinfo=MANILA),
        ),
    ]
