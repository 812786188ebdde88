from pydantic import Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel, Money


class CostCenterCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    budget: Decimal = Field(Decimal("0"), ge=0)


class CostCenterUpdate(CamelModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    budget: Optional[Decimal] = Field(None, ge=0)


class CostCenterOut(CamelModel):
    id: UUID
    code: str
    name: str
    budget: Optional[Money] = None
    project_ids: List[UUID] = []
    created_at: Optional[datetime] = None
