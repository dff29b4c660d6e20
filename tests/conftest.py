"""
Pytest configuration and shared fixtures for testing.

Provides reusable test fixtures:
- test_db: In-memory SQLite database for isolated testing
- test_client: FastAPI TestClient for API integration tests
- make_person / make_state: factories for people and state trees
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from bemanning.core.models import AppState, Demand, Entry, Person, RoleDemand, Schedule
from bemanning.database.database import Base, get_db
from bemanning.main import app

TEST_YEAR = 2026


def build_person(person_id: str = "p1", **overrides) -> Person:
    """Heltidsanställd kock som kan arbeta alla dagar i grupp g1."""
    data = {
        "id": person_id,
        "first_name": "Anna",
        "last_name": f"Berg-{person_id}",
        "start_date": "2020-01-01",
        "employment_pct": 100,
        "workdays_per_week": 5,
        "availability": [True] * 7,
        "group_ids": ["g1"],
        "skills": {"KITCHEN": True},
    }
    data.update(overrides)
    return Person(**data)


def build_state(people=None, year: int = TEST_YEAR, weekday_template=None, **overrides) -> AppState:
    """State med ett tomt år och valfritt rollbehov (samma behov alla veckodagar)."""
    demand = None
    if weekday_template is not None:
        if isinstance(weekday_template, dict):
            weekday_template = [weekday_template] * 7
        demand = Demand(weekday_template=[RoleDemand(**d) for d in weekday_template])
    overrides.setdefault("demand", demand)
    return AppState(
        people=people if people is not None else [build_person()],
        schedule=Schedule.empty(year),
        **overrides,
    )


def set_entry(state: AppState, date: str, person_id: str | None, status: str, **times) -> None:
    """Ersätter personens entry för dagen."""
    year, month, day = (int(x) for x in date.split("-"))
    day_obj = state.month_data(year, month).days[day - 1]
    day_obj.entries = [e for e in day_obj.entries if e.person_id != person_id or person_id is None]
    day_obj.entries.append(Entry(person_id=person_id, status=status, **times))


@pytest.fixture
def make_person():
    return build_person


@pytest.fixture
def make_state():
    return build_state


@pytest.fixture
def put_entry():
    return set_entry


@pytest.fixture(scope="function")
def test_db():
    """
    Create an in-memory SQLite database for testing.

    StaticPool keeps a single connection so the TestClient's worker thread
    sees the same in-memory database as the test.

    Yields:
        SQLAlchemy Session: Database session for test use
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_client(test_db):
    """
    Create FastAPI TestClient with test database dependency override.

    Args:
        test_db: Test database session fixture

    Yields:
        TestClient: FastAPI test client for API testing
    """

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
