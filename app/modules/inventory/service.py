from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ConflictError, NotFoundError, TransactionFailure, ValidationError
from app.modules.inventory.models import Material, InventoryMovement, MovementType
from app.modules.inventory.schemas import MaterialCreate, InventoryMovementCreate
from app.modules.projects.models import Project

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, db: Session):
        self.db = db

    def list_materials(self, tenant_id: UUID) -> List[Material]:
        return self.db.query(Material).filter(Material.tenant_id == tenant_id).order_by(Material.name).all()

    def get_low_stock(self, tenant_id: UUID) -> List[Material]:
        """Materiales bajo el stock mínimo"""
        return self.db.query(Material).filter(
            Material.tenant_id == tenant_id,
            Material.current_stock < Material.min_stock
        ).order_by(Material.name).all()

    def create_material(self, data: MaterialCreate, tenant_id: UUID) -> Material:
        if self.db.query(Material.id).filter(Material.tenant_id == tenant_id, Material.code == data.code).first():
            raise ConflictError(f"Ya existe un material con código {data.code}")

        material = Material(tenant_id=tenant_id, current_stock=0, **data.model_dump())
        self.db.add(material)
        self.db.commit()
        self.db.refresh(material)
        return material

    def get_movements(
        self,
        tenant_id: UUID,
        material_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[InventoryMovement]:
        query = self.db.query(InventoryMovement).options(
            joinedload(InventoryMovement.material)
        ).filter(InventoryMovement.tenant_id == tenant_id)
        if material_id:
            query = query.filter(InventoryMovement.material_id == material_id)
        return query.order_by(InventoryMovement.created_at.desc()).offset(offset).limit(limit).all()

    def create_movement(self, data: InventoryMovementCreate, tenant_id: UUID, user_id: UUID) -> InventoryMovement:
        """Registrar movimiento y ajustar el stock del material en la misma transacción."""
        try:
            material = self.db.query(Material).filter(
                Material.id == data.material_id,
                Material.tenant_id == tenant_id
            ).with_for_update().first()
            if not material:
                raise NotFoundError("Material no encontrado")

            if data.project_id and not self.db.query(Project.id).filter(
                Project.id == data.project_id, Project.tenant_id == tenant_id
            ).first():
                raise NotFoundError("Proyecto no encontrado")

            if data.type == MovementType.OUT and material.current_stock < data.quantity:
                raise ValidationError(
                    f"Stock insuficiente para '{material.name}'. "
                    f"Disponible: {material.current_stock}, Solicitado: {data.quantity}"
                )

            adjustment = data.quantity if data.type == MovementType.IN else -data.quantity
            material.current_stock = material.current_stock + adjustment

            movement = InventoryMovement(
                tenant_id=tenant_id,
                material_id=material.id,
                type=data.type.value,
                quantity=data.quantity,
                description=data.description,
                project_id=data.project_id,
                created_by=user_id
            )
            self.db.add(movement)
            self.db.commit()
            self.db.refresh(movement)

            logger.info(f"Inventory {data.type.value} of {data.quantity} for material {material.code}")
            return movement

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating inventory movement: {e}", exc_info=True)
            raise TransactionFailure("Error registrando el movimiento de inventario")
