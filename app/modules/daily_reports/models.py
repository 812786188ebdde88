from app.database.database import Base
from sqlalchemy import Column, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
import datetime
from app.common.mixins import TenantMixin, TimestampMixin


class DailyReport(Base, TenantMixin, TimestampMixin):
    """Reporte diario de obra"""
    __tablename__ = "daily_reports"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    date = Column(Date, nullable=False, default=datetime.date.today)
    content = Column(Text, nullable=False)

    user = relationship("User")
    project = relationship("Project")
