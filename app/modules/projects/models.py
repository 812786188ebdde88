from app.database.database import Base
from sqlalchemy import Column, String, Integer, Text, Date, Numeric, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin
import enum


class ProjectStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


project_cost_centers = Table(
    "project_cost_centers",
    Base.metadata,
    Column("project_id", UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("cost_center_id", UUID(as_uuid=True), ForeignKey("cost_centers.id", ondelete="CASCADE"), primary_key=True),
)

project_workers = Table(
    "project_workers",
    Base.metadata,
    Column("project_id", UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("worker_id", UUID(as_uuid=True), ForeignKey("workers.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base, TenantMixin, TimestampMixin):
    """Obra / proyecto de construcción"""
    __tablename__ = "projects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ProjectStatus.ACTIVE.value)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    budget = Column(Numeric(15, 2), nullable=True)
    address = Column(String(300), nullable=True)
    progress = Column(Integer, nullable=False, default=0)  # 0-100
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    client = relationship("Client")
    cost_centers = relationship("CostCenter", secondary=project_cost_centers, back_populates="projects")
    workers = relationship("Worker", secondary=project_workers)

    @property
    def cost_center_ids(self):
        return [cc.id for cc in self.cost_centers]

    @property
    def worker_ids(self):
        return [w.id for w in self.workers]
