from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from app.modules.inventory.service import InventoryService
from app.modules.inventory.schemas import (
    MaterialCreate, MaterialOut, InventoryMovementCreate, InventoryMovementOut
)

inventory_router = APIRouter(prefix="/inventory", tags=["Inventory"])


@inventory_router.get("/materials", response_model=List[MaterialOut])
def list_materials(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("inventory", "read"))
):
    """List materials ordered by name."""
    return InventoryService(db).list_materials(auth_context.tenant_id)


@inventory_router.get("/materials/low-stock", response_model=List[MaterialOut])
def list_low_stock_materials(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("inventory", "read"))
):
    """Materials whose current stock is below the minimum."""
    return InventoryService(db).get_low_stock(auth_context.tenant_id)


@inventory_router.post("/materials", response_model=MaterialOut, status_code=status.HTTP_201_CREATED)
def create_material(
    data: MaterialCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("inventory", "create"))
):
    return InventoryService(db).create_material(data, auth_context.tenant_id)


@inventory_router.get("/movements", response_model=List[InventoryMovementOut])
def list_movements(
    material_id: Optional[UUID] = Query(None, alias="materialId"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("inventory", "read"))
):
    return InventoryService(db).get_movements(auth_context.tenant_id, material_id, limit, offset)


@inventory_router.post("/movements", response_model=InventoryMovementOut, status_code=status.HTTP_201_CREATED)
def create_movement(
    data: InventoryMovementCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("inventory", "create"))
):
    """Create an IN/OUT movement and update the material stock. OUT cannot exceed the stock."""
    return InventoryService(db).create_movement(data, auth_context.tenant_id, auth_context.user_id)
