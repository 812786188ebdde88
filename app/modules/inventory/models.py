from app.database.database import Base
from sqlalchemy import Column, String, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
import enum
from app.common.mixins import TenantMixin, TimestampMixin


class MovementType(str, enum.Enum):
    IN = "IN"      # Ingreso a bodega
    OUT = "OUT"    # Salida (consumo en obra)


class Material(Base, TenantMixin, TimestampMixin):
    __tablename__ = "materials"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    code = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False, index=True)
    unit = Column(String(20), nullable=False, default="UN")
    min_stock = Column(Numeric(12, 3), nullable=False, default=0)
    current_stock = Column(Numeric(12, 3), nullable=False, default=0)

    movements = relationship("InventoryMovement", back_populates="material", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_material_tenant_code"),
    )


class InventoryMovement(Base, TenantMixin, TimestampMixin):
    __tablename__ = "inventory_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    material_id = Column(UUID(as_uuid=True), ForeignKey("materials.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(3), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    description = Column(String(300), nullable=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    material = relationship("Material", back_populates="movements")

    @property
    def material_name(self):
        return self.material.name if self.material else None
