"""Pytest configuration and shared fixtures."""

import os

# Set test database URL BEFORE any imports from src
# This ensures SessionLocal and engine use an in-memory database
os.environ["DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.models import Base  # noqa: E402
from src.services import engine, get_db  # noqa: E402
from src.services.ledger_store import SqlAlchemyLedgerStore  # noqa: E402


@pytest.fixture
def db_session():
    """Provide a database session with all tables created, dropped afterwards."""
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db_session):
    """Ledger store over the test session."""
    return SqlAlchemyLedgerStore(db_session)


@pytest.fixture
def roommates(store):
    """Three users sharing one household; returns (jamie, kim, mike, household)."""
    jamie = store.create_user("jamie", "Jamie Smith", "jamie@remote.co", "JS", "pw")
    kim = store.create_user("kim", "Kim Lee", "kim@example.com", "KL", "pw")
    mike = store.create_user("mike", "Mike Rodriguez", "mike@example.com", "MR", "pw")
    household = store.create_household("Our Apartment", created_by_id=jamie.id)
    for user in (jamie, kim, mike):
        store.create_roommate(user_id=user.id, household_id=household.id)
    return jamie, kim, mike, household


@pytest.fixture
def categories(store):
    """Rent, Utilities and Groceries categories keyed by name."""
    return {
        name: store.create_category(name=name, icon=icon, color=color)
        for name, icon, color in [
            ("Rent", "home", "#6366f1"),
            ("Utilities", "bolt", "#8b5cf6"),
            ("Groceries", "shopping-basket", "#f97316"),
        ]
    }


@pytest.fixture
def client(db_session):
    """FastAPI test client whose requests share the test session."""
    from src.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
