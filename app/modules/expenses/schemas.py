from pydantic import Field, field_validator
from decimal import Decimal
from typing import Optional
from uuid import UUID
import datetime

from app.common.schemas import CamelModel, Money


def _blank_id(v):
    if isinstance(v, str) and v.strip().lower() in ("", "none"):
        return None
    return v


class ExpenseCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=300)
    category: Optional[str] = Field(None, max_length=100)
    amount: Decimal = Field(..., gt=0)
    date: datetime.date = Field(default_factory=datetime.date.today)
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    reference: Optional[str] = Field(None, max_length=100)

    @field_validator("project_id", "cost_center_id", mode="before")
    @classmethod
    def blank_ids(cls, v):
        return _blank_id(v)


class ExpenseUpdate(CamelModel):
    description: Optional[str] = Field(None, min_length=1, max_length=300)
    category: Optional[str] = Field(None, max_length=100)
    amount: Optional[Decimal] = Field(None, gt=0)
    date: Optional[datetime.date] = None
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    reference: Optional[str] = Field(None, max_length=100)

    @field_validator("project_id", "cost_center_id", mode="before")
    @classmethod
    def blank_ids(cls, v):
        return _blank_id(v)


class ExpenseOut(CamelModel):
    id: UUID
    description: str
    category: Optional[str] = None
    amount: Money
    date: datetime.date
    project_id: Optional[UUID] = None
    cost_center_id: Optional[UUID] = None
    reference: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
