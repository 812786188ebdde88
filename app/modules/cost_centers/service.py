from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from uuid import UUID

from app.common.exceptions import ConflictError, NotFoundError
from app.modules.cost_centers.models import CostCenter
from app.modules.cost_centers.schemas import CostCenterCreate, CostCenterUpdate


class CostCenterService:
    def __init__(self, db: Session):
        self.db = db

    def _check_code(self, code: str, tenant_id: UUID, exclude_id: Optional[UUID] = None) -> None:
        query = self.db.query(CostCenter.id).filter(
            CostCenter.tenant_id == tenant_id,
            CostCenter.code == code
        )
        if exclude_id:
            query = query.filter(CostCenter.id != exclude_id)
        if query.first():
            raise ConflictError("Ya existe un centro de costo con este código.")

    def list_cost_centers(self, tenant_id: UUID) -> List[CostCenter]:
        return self.db.query(CostCenter).options(
            selectinload(CostCenter.projects)
        ).filter(CostCenter.tenant_id == tenant_id).order_by(CostCenter.code).all()

    def get_cost_center(self, cost_center_id: UUID, tenant_id: UUID) -> CostCenter:
        cost_center = self.db.query(CostCenter).filter(
            CostCenter.id == cost_center_id,
            CostCenter.tenant_id == tenant_id
        ).first()
        if not cost_center:
            raise NotFoundError("Centro de costo no encontrado")
        return cost_center

    def create_cost_center(self, data: CostCenterCreate, tenant_id: UUID) -> CostCenter:
        self._check_code(data.code, tenant_id)
        cost_center = CostCenter(tenant_id=tenant_id, **data.model_dump())
        self.db.add(cost_center)
        self.db.commit()
        self.db.refresh(cost_center)
        return cost_center

    def update_cost_center(self, cost_center_id: UUID, data: CostCenterUpdate, tenant_id: UUID) -> CostCenter:
        cost_center = self.get_cost_center(cost_center_id, tenant_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "code" in changes and changes["code"] != cost_center.code:
            self._check_code(changes["code"], tenant_id, exclude_id=cost_center.id)

        for field, value in changes.items():
            setattr(cost_center, field, value)
        self.db.commit()
        self.db.refresh(cost_center)
        return cost_center

    def delete_cost_center(self, cost_center_id: UUID, tenant_id: UUID) -> None:
        cost_center = self.get_cost_center(cost_center_id, tenant_id)
        self.db.delete(cost_center)
        self.db.commit()
