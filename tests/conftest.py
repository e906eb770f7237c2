"""
Test fixtures and shared setup.

Runs against a throwaway SQLite file by default; point DATABASE_URL at a
Postgres test database to exercise the advisory-lock path instead.
Tables are created before and dropped after every DB test, so services are
free to commit.
"""

import os
import tempfile
import pytest
from datetime import date, timedelta
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

# ── Override settings BEFORE importing app modules ────────────────────────────
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite:///" + os.path.join(tempfile.gettempdir(), "catalog_booking_test.db"),
)
os.environ.setdefault("ENVIRONMENT", "test")

from app.main import app
from app.database import build_engine, get_db
from app.models import *  # noqa — ensures all models registered
from app.models.base import Base
from app.models.catalog import PricingKind


# ── Test engine ───────────────────────────────────────────────────────────────
TEST_DATABASE_URL = os.environ["DATABASE_URL"]
test_engine = build_engine(TEST_DATABASE_URL)
TestSessionLocal = sessionmaker(
    bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False
)


@pytest.fixture
def session_factory():
    """Fresh tables for one test; yields a sessionmaker for tests that need several sessions."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield TestSessionLocal
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    """
    FastAPI test client with DB dependency overridden to use the test session.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ── Helpers ───────────────────────────────────────────────────────────────────


def next_weekday(weekday: int) -> date:
    """The next date (strictly after today) falling on weekday (Monday = 0)."""
    today = date.today()
    days_ahead = (weekday - today.weekday() - 1) % 7 + 1
    return today + timedelta(days=days_ahead)


# ── Data builder fixtures ──────────────────────────────────────────────────────


@pytest.fixture
def beverages(db: Session):
    from app.models.catalog import Category

    category = Category(
        name="Beverages",
        description="Hot and cold beverages",
        tax_applicable=True,
        tax_percentage=Decimal("5"),
    )
    db.add(category)
    db.commit()
    return category


@pytest.fixture
def meeting_rooms(db: Session):
    from app.models.catalog import Category

    category = Category(
        name="Meeting Rooms",
        tax_applicable=True,
        tax_percentage=Decimal("18"),
    )
    db.add(category)
    db.commit()
    return category


@pytest.fixture
def hot_drinks(db: Session, beverages):
    from app.models.catalog import Subcategory

    subcategory = Subcategory(category_id=beverages.id, name="Hot Drinks")
    db.add(subcategory)
    db.commit()
    return subcategory


@pytest.fixture
def make_item(db: Session):
    """Factory: make_item(parent, **fields) where parent is a Category or Subcategory."""
    from app.models.catalog import Addon, Category, Item

    def _make(parent, addons=(), **fields):
        fields.setdefault("name", "Test Item")
        fields.setdefault("pricing_kind", PricingKind.STATIC)
        fields.setdefault("pricing_config", {"base_price": 100})
        if isinstance(parent, Category):
            fields["category_id"] = parent.id
        else:
            fields["subcategory_id"] = parent.id
        item = Item(
            addons=[Addon(name=name, price=Decimal(str(price))) for name, price in addons],
            **fields,
        )
        db.add(item)
        db.commit()
        return item

    return _make


@pytest.fixture
def cappuccino(make_item, hot_drinks):
    """Static 200 with two addons, taxed 5% via Hot Drinks → Beverages."""
    return make_item(
        hot_drinks,
        name="Cappuccino",
        pricing_config={"base_price": 200},
        addons=[("Extra shot", 50), ("Oat milk", 40)],
    )


@pytest.fixture
def conference_room(make_item, meeting_rooms):
    """Tiered by hours, bookable Monday–Friday 09:00–18:00."""
    return make_item(
        meeting_rooms,
        name="Conference Room A",
        pricing_kind=PricingKind.TIERED,
        pricing_config={
            "tiers": [
                {"max_units": 1, "price": 300},
                {"max_units": 2, "price": 500},
                {"max_units": 4, "price": 800},
            ]
        },
        is_bookable=True,
        availability_config={
            "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
            "time_slots": [{"start": "09:00", "end": "18:00"}],
        },
        addons=[("Projector", 100)],
    )


@pytest.fixture
def booking_date() -> date:
    """A future Wednesday, inside conference_room's availability."""
    return next_weekday(2)
