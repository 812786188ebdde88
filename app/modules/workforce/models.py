from app.database.database import Base
from sqlalchemy import Column, String, Integer, Text, JSON, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin


crew_workers = Table(
    "crew_workers",
    Base.metadata,
    Column("crew_id", UUID(as_uuid=True), ForeignKey("crews.id", ondelete="CASCADE"), primary_key=True),
    Column("worker_id", UUID(as_uuid=True), ForeignKey("workers.id", ondelete="CASCADE"), primary_key=True),
)


class Worker(Base, TenantMixin, TimestampMixin):
    __tablename__ = "workers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    rut = Column(String(20), nullable=False)
    name = Column(String(200), nullable=False, index=True)
    role = Column(String(100), nullable=True)        # cargo
    specialty = Column(String(100), nullable=True)
    email = Column(String(150), nullable=True)
    phone = Column(String(50), nullable=True)
    experience_years = Column(Integer, nullable=True)
    certifications = Column(JSON, nullable=False, default=list)

    crews = relationship("Crew", secondary=crew_workers, back_populates="workers")

    __table_args__ = (
        UniqueConstraint("tenant_id", "rut", name="uq_worker_tenant_rut"),
    )


class Crew(Base, TenantMixin, TimestampMixin):
    """Cuadrilla de trabajadores"""
    __tablename__ = "crews"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False)
    role = Column(String(100), nullable=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    workers = relationship("Worker", secondary=crew_workers, back_populates="crews", order_by="Worker.name")

    @property
    def worker_ids(self):
        return [w.id for w in self.workers]


class JobTitle(Base, TenantMixin, TimestampMixin):
    __tablename__ = "job_titles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_job_title_tenant_name"),
    )
