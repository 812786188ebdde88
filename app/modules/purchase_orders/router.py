from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.purchase_orders.service import PurchaseOrderService
from app.modules.purchase_orders.schemas import PurchaseOrderCreate, PurchaseOrderOut

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])


@router.get("/", response_model=List[PurchaseOrderOut])
def list_purchase_orders(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("purchase-orders", "read"))
):
    return PurchaseOrderService(db).list_orders(auth_context.tenant_id)


@router.post("/", response_model=PurchaseOrderOut, status_code=status.HTTP_201_CREATED)
def create_purchase_order(
    data: PurchaseOrderCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("purchase-orders", "create"))
):
    return PurchaseOrderService(db).create_order(data, auth_context.tenant_id)


@router.get("/{order_id}", response_model=PurchaseOrderOut)
def get_purchase_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("purchase-orders", "read"))
):
    return PurchaseOrderService(db).get_order(order_id, auth_context.tenant_id)


@router.delete("/{order_id}", response_model=SuccessResponse)
def delete_purchase_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("purchase-orders", "delete"))
):
    PurchaseOrderService(db).delete_order(order_id, auth_context.tenant_id)
    return SuccessResponse()
