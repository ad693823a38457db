from __future__ import annotations

import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Ensure the project root (which exposes the ``backend`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Tests create the schema from metadata; the lifespan must not touch a real database.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "0")

from backend.app import models
from backend.app.database import Base, get_db
from backend.app.main import app
from backend.app.routers.finance import get_now, get_today

TODAY = date(2025, 3, 15)
NOW = datetime(2025, 3, 15, 9, 30)

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _order(
    db_session: Session,
    *,
    number: str,
    created_at: datetime,
    status: models.OrderStatus,
    amount: int,
    shipping: int = 0,
    source: str | None = None,
    customer: models.Customer | None = None,
    items: tuple = (),
) -> models.Order:
    order = models.Order(
        order_number=number,
        created_at=created_at,
        status=status,
        source=source,
        total_amount_minor=amount,
        total_shipping_minor=shipping,
        customer=customer,
    )
    for product_name, variant_title, quantity, price, cost in items:
        order.items.append(
            models.OrderItem(
                product_name=product_name,
                variant_title=variant_title,
                quantity=quantity,
                unit_price_minor=price,
                unit_cost_minor=cost,
            )
        )
    db_session.add(order)
    return order


@pytest.fixture
def seed_finance_data(db_session: Session) -> dict:
    """Orders and expenses around March 2025.

    March revenue orders: 10000 + 500 shipping (shopify) and 4000 (no source).
    Only the first order's items carry a unit cost (2 x 300).
    """

    alice = models.Customer(full_name="Alice Rahman", email="alice@example.com", phone="+97455501234")
    bob = models.Customer(full_name="Bob Saleh", email=None, phone=None)
    db_session.add_all([alice, bob])

    paid = _order(
        db_session,
        number="A-1001",
        created_at=datetime(2025, 3, 5, 10, 0),
        status=models.OrderStatus.PAID,
        amount=10000,
        shipping=500,
        source=models.OrderSource.SHOPIFY.value,
        customer=alice,
        items=(("Abaya", "Black / M", 2, 5000, 300),),
    )
    completed = _order(
        db_session,
        number="A-1002",
        created_at=datetime(2025, 3, 20, 15, 30),
        status=models.OrderStatus.COMPLETED,
        amount=4000,
        customer=bob,
        items=(("Kaftan", None, 1, 4000, None),),
    )
    pending = _order(
        db_session,
        number="A-1003",
        created_at=datetime(2025, 3, 25, 12, 0),
        status=models.OrderStatus.PENDING,
        amount=9000,
        source=models.OrderSource.WHATSAPP.value,
        customer=alice,
        items=(("Jalabiya", "Navy", 1, 9000, 4000),),
    )
    february = _order(
        db_session,
        number="A-0990",
        created_at=datetime(2025, 2, 10, 8, 0),
        status=models.OrderStatus.PAID,
        amount=2000,
        source=models.OrderSource.WHATSAPP.value,
    )

    expenses = [
        models.Expense(category="Fabric", amount_minor=1000, incurred_at=datetime(2025, 3, 10, 9, 0)),
        models.Expense(category="Marketing", amount_minor=500, incurred_at=datetime(2025, 3, 31, 23, 30)),
        models.Expense(category=None, amount_minor=300, incurred_at=datetime(2025, 3, 15, 0, 0)),
        models.Expense(category="Fabric", amount_minor=700, incurred_at=datetime(2025, 4, 1, 0, 0)),
        models.Expense(category="Rent", amount_minor=1000, incurred_at=datetime(2025, 2, 15, 12, 0)),
    ]
    db_session.add_all(expenses)
    db_session.flush()

    return {
        "customers": {"alice": alice, "bob": bob},
        "orders": {
            "paid": paid,
            "completed": completed,
            "pending": pending,
            "february": february,
        },
        "expenses": expenses,
    }
