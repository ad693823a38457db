from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import PaginatedResponse


class ExpenseBase(BaseModel):
    category: Optional[str] = Field(None, max_length=100, description="Category of the expense")
    description: Optional[str] = Field(None, description="Detailed description of the expense")
    amount_minor: int = Field(..., gt=0, description="Amount of the expense in minor currency units")
    currency: str = Field("QAR", min_length=3, max_length=3, description="ISO currency code")
    incurred_at: Optional[datetime] = Field(None, description="When the expense was incurred")


class ExpenseCreate(ExpenseBase):
    """Schema used to create new expenses."""

    pass


class ExpenseRead(ExpenseBase):
    """Schema representing stored expenses."""

    id: str
    incurred_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseListResponse(PaginatedResponse[ExpenseRead]):
    """Paginated expense listing."""
