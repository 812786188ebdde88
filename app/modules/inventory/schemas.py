from pydantic import AliasChoices, Field
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel, Money
from app.modules.inventory.models import MovementType


class MaterialCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    unit: str = Field("UN", min_length=1, max_length=20, description="Unidad de medida (UN, M3, KG, ...)")
    min_stock: Decimal = Field(Decimal("0"), ge=0)


class MaterialOut(CamelModel):
    id: UUID
    code: str
    name: str
    unit: str
    min_stock: Money
    current_stock: Money
    created_at: Optional[datetime] = None


class InventoryMovementCreate(CamelModel):
    material_id: UUID
    type: MovementType
    quantity: Decimal = Field(..., gt=0, description="Cantidad siempre positiva; el tipo define el signo")
    # El frontend envía `notes`
    description: Optional[str] = Field(None, max_length=300, validation_alias=AliasChoices("description", "notes"))
    project_id: Optional[UUID] = None


class InventoryMovementOut(CamelModel):
    id: UUID
    material_id: UUID
    material_name: Optional[str] = None
    type: MovementType
    quantity: Money
    description: Optional[str] = None
    project_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
