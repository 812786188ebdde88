from pydantic import Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import datetime

from app.common.schemas import CamelModel, Money
from app.modules.purchase_orders.models import PurchaseOrderStatus


class PurchaseOrderItemCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)


class PurchaseOrderItemOut(CamelModel):
    id: UUID
    position: int
    description: str
    quantity: Money
    unit_price: Money
    total: Money


class PurchaseOrderCreate(CamelModel):
    number: str = Field(..., min_length=1, max_length=50)
    provider: str = Field(..., min_length=1, max_length=200)
    date: datetime.date = Field(default_factory=datetime.date.today)
    project_id: Optional[UUID] = None
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1, description="Debe incluir al menos un item")


class PurchaseOrderOut(CamelModel):
    id: UUID
    number: str
    provider: str
    date: datetime.date
    project_id: Optional[UUID] = None
    project_name: Optional[str] = None
    status: PurchaseOrderStatus
    total_amount: Money
    items: List[PurchaseOrderItemOut] = []
    created_at: Optional[datetime.datetime] = None
