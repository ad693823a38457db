"""Router exposing expense operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import ExpenseService, PeriodQueryError
from ..services.periods import period_from_query

router = APIRouter()


@router.get("/", response_model=schemas.ExpenseListResponse)
def list_expenses(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of expenses to skip"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of expenses to return"),
    category: Optional[str] = Query(None, description="Filter by expense category"),
    period_type: str = Query("month", description="Period kind used with year/month/quarter"),
    year: Optional[int] = Query(None, description="Only return expenses incurred in this period"),
    month: Optional[int] = Query(None, description="Month number (1-12)"),
    quarter: Optional[int] = Query(None, description="Quarter number (1-4)"),
) -> schemas.ExpenseListResponse:
    """Return expenses with pagination and filtering."""

    period = None
    if year is not None:
        try:
            period = period_from_query(period_type, year, month=month, quarter=quarter)
        except PeriodQueryError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    items, total = ExpenseService.list_expenses(
        db,
        skip=skip,
        limit=limit,
        category=category,
        period=period,
    )
    return schemas.ExpenseListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("/", response_model=schemas.ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(expense_in: schemas.ExpenseCreate, db: Session = Depends(get_db)) -> schemas.ExpenseRead:
    return ExpenseService.create_expense(db, expense_in)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, db: Session = Depends(get_db)) -> None:
    expense = ExpenseService.get_expense(db, expense_id)
    if expense is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    ExpenseService.delete_expense(db, expense)
