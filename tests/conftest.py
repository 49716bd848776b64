"""Shared test fixtures for the delivery reconciliation service tests.

Uses a SQLite file database so tests run without PostgreSQL.
"""

from __future__ import annotations

import os

# Override DATABASE_URL before importing anything from app; the Settings
# model reads .env eagerly via pydantic-settings, and the module-level
# ``engine`` in app.core.database would try to connect to PostgreSQL.
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.core.database import Base, get_db
from app.main import app
from app.models import Article, Delivery, DeliveryLine, Flight, OrderLine, PurchaseOrder
from app.services.procurement import line_amount

# Use SQLite file-based database for tests (no PostgreSQL needed)
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)


# Enable foreign keys for SQLite
@event.listens_for(engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    """Open extra sessions on the test database (e.g. a concurrent request)."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with overridden DB dependency."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ── Reference data ───────────────────────────────────────────────────


@pytest.fixture
def flight(db_session) -> Flight:
    row = Flight(
        id=uuid.uuid4(),
        flight_number="TU712",
        flight_date=date(2025, 3, 14),
        origin="TUN",
        destination="CDG",
    )
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def articles(db_session) -> dict[str, Article]:
    """Catalog articles keyed by their lowercase name."""
    rows = {
        name.lower(): Article(id=uuid.uuid4(), code=f"ART-{name.upper()}", name=name)
        for name in ("Water", "Bread", "Cheese", "Juice")
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return rows


@pytest.fixture
def make_order(db_session, flight):
    """Factory: ``make_order([(article, qty, price), ...])`` -> PurchaseOrder."""
    counter = iter(range(1, 1000))

    def _make(lines, status: str = "confirmed") -> PurchaseOrder:
        order = PurchaseOrder(
            id=uuid.uuid4(),
            number=f"PO-{next(counter):04d}",
            flight_id=flight.id,
            order_date=date(2025, 3, 10),
            supplier="Sky Catering",
            status=status,
        )
        for position, (article, qty, price) in enumerate(lines):
            price = Decimal(price)
            order.lines.append(
                OrderLine(
                    position=position,
                    article_id=article.id,
                    quantity=qty,
                    unit_price=price,
                    line_amount=line_amount(qty, price),
                )
            )
        order.total_amount = sum((l.line_amount for l in order.lines), Decimal("0"))
        db_session.add(order)
        db_session.commit()
        return order

    return _make


@pytest.fixture
def make_delivery(db_session, flight):
    """Factory: ``make_delivery([(article_or_None, qty, price), ...], order=...)``.

    A line whose article is a string is stored as a free-text line.
    """
    counter = iter(range(1, 1000))

    def _make(lines, order: PurchaseOrder | None = None, status: str = "received",
              with_flight: bool = True) -> Delivery:
        delivery = Delivery(
            id=uuid.uuid4(),
            number=f"DN-{next(counter):04d}",
            flight_id=flight.id if with_flight else None,
            order_id=order.id if order is not None else None,
            delivery_date=date(2025, 3, 14),
            supplier="Sky Catering",
            status=status,
        )
        for position, (article, qty, price) in enumerate(lines):
            price = Decimal(price)
            text_only = isinstance(article, str)
            delivery.lines.append(
                DeliveryLine(
                    position=position,
                    article_id=None if text_only else article.id,
                    article_name=article if text_only else article.name,
                    quantity=qty,
                    unit_price=price,
                    line_amount=line_amount(qty, price),
                )
            )
        delivery.total_amount = sum(
            (l.line_amount for l in delivery.lines), Decimal("0")
        )
        db_session.add(delivery)
        db_session.commit()
        return delivery

    return _make
