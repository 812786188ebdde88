from app.database.database import Base
from sqlalchemy import Column, String, Integer, Date, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
import datetime
import enum
from app.common.mixins import TenantMixin, TimestampMixin


class PurchaseOrderStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class PurchaseOrder(Base, TenantMixin, TimestampMixin):
    """Orden de compra a proveedor"""
    __tablename__ = "purchase_orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    number = Column(String(50), nullable=False)
    provider = Column(String(200), nullable=False)
    date = Column(Date, nullable=False, default=datetime.date.today)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=PurchaseOrderStatus.DRAFT.value)
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)

    project = relationship("Project")
    items = relationship(
        "PurchaseOrderItem", back_populates="purchase_order",
        cascade="all, delete-orphan", order_by="PurchaseOrderItem.position"
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_purchase_order_tenant_number"),
    )

    @property
    def project_name(self):
        return self.project.name if self.project else None


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    purchase_order_id = Column(
        UUID(as_uuid=True), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(500), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    total = Column(Numeric(15, 2), nullable=False)

    purchase_order = relationship("PurchaseOrder", back_populates="items")
