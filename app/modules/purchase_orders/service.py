from fastapi import HTTPException
from sqlalchemy.orm import Session, selectinload, joinedload
from decimal import Decimal
from typing import List
from uuid import UUID
import logging

from app.common.exceptions import ConflictError, NotFoundError, TransactionFailure
from app.modules.purchase_orders.models import PurchaseOrder, PurchaseOrderItem
from app.modules.purchase_orders.schemas import PurchaseOrderCreate
from app.modules.projects.models import Project

logger = logging.getLogger(__name__)


class PurchaseOrderService:
    def __init__(self, db: Session):
        self.db = db

    def list_orders(self, tenant_id: UUID) -> List[PurchaseOrder]:
        return self.db.query(PurchaseOrder).options(
            joinedload(PurchaseOrder.project),
            selectinload(PurchaseOrder.items)
        ).filter(PurchaseOrder.tenant_id == tenant_id).order_by(PurchaseOrder.created_at.desc()).all()

    def get_order(self, order_id: UUID, tenant_id: UUID) -> PurchaseOrder:
        order = self.db.query(PurchaseOrder).options(
            selectinload(PurchaseOrder.items)
        ).filter(
            PurchaseOrder.id == order_id,
            PurchaseOrder.tenant_id == tenant_id
        ).first()
        if not order:
            raise NotFoundError("Orden de compra no encontrada")
        return order

    def create_order(self, data: PurchaseOrderCreate, tenant_id: UUID) -> PurchaseOrder:
        """Crear OC; total de cada item = cantidad x precio, total de la OC = suma de items"""
        try:
            if self.db.query(PurchaseOrder.id).filter(
                PurchaseOrder.tenant_id == tenant_id,
                PurchaseOrder.number == data.number
            ).first():
                raise ConflictError(f"Ya existe la orden de compra {data.number}")

            if data.project_id and not self.db.query(Project.id).filter(
                Project.id == data.project_id, Project.tenant_id == tenant_id
            ).first():
                raise NotFoundError("Proyecto no encontrado")

            items = []
            total_amount = Decimal("0")
            for position, item in enumerate(data.items):
                line_total = item.quantity * item.unit_price
                total_amount += line_total
                items.append(PurchaseOrderItem(
                    position=position,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=line_total
                ))

            order = PurchaseOrder(
                tenant_id=tenant_id,
                number=data.number,
                provider=data.provider,
                date=data.date,
                project_id=data.project_id,
                status=data.status.value,
                total_amount=total_amount,
                items=items
            )
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
            return order

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating purchase order {data.number}: {e}", exc_info=True)
            raise TransactionFailure("Error creando la orden de compra")

    def delete_order(self, order_id: UUID, tenant_id: UUID) -> None:
        order = self.get_order(order_id, tenant_id)
        self.db.delete(order)
        self.db.commit()
