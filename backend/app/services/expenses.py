"""Business logic for expenses."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas
from .finance_types import Period

LOGGER = logging.getLogger(__name__)


class ExpenseService:
    """Encapsulates CRUD operations for expenses."""

    @staticmethod
    def list_expenses(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        category: Optional[str] = None,
        period: Optional[Period] = None,
    ) -> Tuple[Iterable[models.Expense], int]:
        query = db.query(models.Expense)

        if category:
            normalized = category.strip().lower()
            query = query.filter(func.lower(models.Expense.category) == normalized)
        if period is not None:
            query = query.filter(models.Expense.incurred_at >= period.start).filter(
                models.Expense.incurred_at < period.end_exclusive
            )

        total = query.count()
        items = (
            query.order_by(models.Expense.incurred_at.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def create_expense(db: Session, data: schemas.ExpenseCreate) -> models.Expense:
        payload = data.model_dump(exclude_none=True)
        if payload.get("category"):
            payload["category"] = payload["category"].strip()
        expense = models.Expense(**payload)
        db.add(expense)
        db.commit()
        db.refresh(expense)
        LOGGER.info("Recorded expense %s of %s minor units", expense.id, expense.amount_minor)
        return expense

    @staticmethod
    def get_expense(db: Session, expense_id: str) -> Optional[models.Expense]:
        return db.query(models.Expense).filter(models.Expense.id == expense_id).first()

    @staticmethod
    def delete_expense(db: Session, expense: models.Expense) -> None:
        db.delete(expense)
        db.commit()
