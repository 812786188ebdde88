from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.cost_centers.service import CostCenterService
from app.modules.cost_centers.schemas import CostCenterCreate, CostCenterUpdate, CostCenterOut

router = APIRouter(prefix="/cost-centers", tags=["Cost Centers"])


@router.get("/", response_model=List[CostCenterOut])
def list_cost_centers(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("cost-centers", "read"))
):
    return CostCenterService(db).list_cost_centers(auth_context.tenant_id)


@router.post("/", response_model=CostCenterOut, status_code=status.HTTP_201_CREATED)
def create_cost_center(
    data: CostCenterCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("cost-centers", "create"))
):
    """Crear centro de costo; el código es único por empresa."""
    return CostCenterService(db).create_cost_center(data, auth_context.tenant_id)


@router.put("/{cost_center_id}", response_model=CostCenterOut)
def update_cost_center(
    cost_center_id: UUID,
    data: CostCenterUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("cost-centers", "update"))
):
    return CostCenterService(db).update_cost_center(cost_center_id, data, auth_context.tenant_id)


@router.delete("/{cost_center_id}", response_model=SuccessResponse)
def delete_cost_center(
    cost_center_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("cost-centers", "delete"))
):
    CostCenterService(db).delete_cost_center(cost_center_id, auth_context.tenant_id)
    return SuccessResponse()
