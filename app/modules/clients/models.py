from app.database.database import Base
from sqlalchemy import Column, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin


class Client(Base, TenantMixin, TimestampMixin):
    """Cliente o proveedor (razón social chilena identificada por RUT)."""
    __tablename__ = "clients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    rut = Column(String(20), nullable=False)
    name = Column(String(200), nullable=False, index=True)  # razón social
    trade_name = Column(String(200), nullable=True)          # nombre comercial
    email = Column(String(150), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(300), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "rut", name="uq_client_tenant_rut"),
    )
