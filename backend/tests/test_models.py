from __future__ import annotations

from datetime import datetime

from backend.app import models


def test_batch_insert_assigns_string_identifiers(db_session):
    customers = [
        models.Customer(full_name="Alice Rahman"),
        models.Customer(full_name="Bob Saleh"),
        models.Customer(full_name="Carol Haddad"),
    ]
    expenses = [
        models.Expense(category="Fabric", amount_minor=1000, incurred_at=datetime(2025, 3, 1)),
        models.Expense(category="Rent", amount_minor=2000, incurred_at=datetime(2025, 3, 2)),
    ]
    order = models.Order(
        order_number="A-2001",
        created_at=datetime(2025, 3, 3, 10, 0),
        status=models.OrderStatus.PAID,
        total_amount_minor=3000,
        total_shipping_minor=0,
    )
    for name in ("Abaya", "Kaftan"):
        order.items.append(models.OrderItem(product_name=name, quantity=1, unit_price_minor=1500))
    db_session.add_all([*customers, *expenses, order])
    db_session.flush()

    identifiers = [row.id for row in [*customers, *expenses, order, *order.items]]
    assert all(isinstance(identifier, str) for identifier in identifiers)
    assert len(set(identifiers)) == len(identifiers)

    db_session.expire_all()
    reloaded = db_session.get(models.Customer, customers[0].id)
    assert reloaded is not None
    assert reloaded.full_name == "Alice Rahman"
