from app.database.database import Base
from sqlalchemy import Column, String, Integer, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
import enum
from app.common.mixins import TenantMixin, TimestampMixin


class DocumentType(str, enum.Enum):
    INVOICE = "INVOICE"
    CONTRACT = "CONTRACT"
    RECEIPT = "RECEIPT"
    PLAN = "PLAN"          # Planos
    OTHER = "OTHER"


class DocumentStatus(str, enum.Enum):
    PENDING = "PENDING"    # Subida en cola
    UPLOADED = "UPLOADED"
    FAILED = "FAILED"


class Document(Base, TenantMixin, TimestampMixin):
    __tablename__ = "documents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    type = Column(String(20), nullable=False, default=DocumentType.OTHER.value)
    reference_id = Column(String(100), nullable=True, index=True)  # factura, obra, OC...
    name = Column(String(255), nullable=False)
    url = Column(Text, nullable=False, default="")
    storage_key = Column(String(500), nullable=True)
    content_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=DocumentStatus.UPLOADED.value)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
