from app.database.database import Base
from sqlalchemy import Column, String, Date, Numeric, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
import datetime
from app.common.mixins import TenantMixin, TimestampMixin


class Expense(Base, TenantMixin, TimestampMixin):
    """Gasto menor no facturado (caja chica, combustible, fletes)"""
    __tablename__ = "expenses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    description = Column(String(300), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False, default=datetime.date.today)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    cost_center_id = Column(UUID(as_uuid=True), ForeignKey("cost_centers.id", ondelete="SET NULL"), nullable=True)
    reference = Column(String(100), nullable=True)
