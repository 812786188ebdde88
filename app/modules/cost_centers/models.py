from app.database.database import Base
from sqlalchemy import Column, String, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from uuid import uuid4
from app.common.mixins import TenantMixin, TimestampMixin


class CostCenter(Base, TenantMixin, TimestampMixin):
    __tablename__ = "cost_centers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    code = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    budget = Column(Numeric(15, 2), nullable=True)

    projects = relationship("Project", secondary="project_cost_centers", back_populates="cost_centers")

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_cost_center_tenant_code"),
    )

    @property
    def project_ids(self):
        return [p.id for p in self.projects]
