from pydantic import Field, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime

from app.common.schemas import CamelModel, Money
from app.modules.projects.models import ProjectStatus


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    client_id: Optional[UUID] = None
    budget: Decimal = Field(Decimal("0"), ge=0)
    address: Optional[str] = Field(None, max_length=300)
    progress: int = Field(0, ge=0, le=100, description="Avance de la obra (0-100)")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    cost_center_ids: List[UUID] = Field(default_factory=list)
    worker_ids: List[UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("La fecha de término no puede ser anterior a la de inicio")
        return self


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    client_id: Optional[UUID] = None
    budget: Optional[Decimal] = Field(None, ge=0)
    address: Optional[str] = Field(None, max_length=300)
    progress: Optional[int] = Field(None, ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    cost_center_ids: Optional[List[UUID]] = None
    worker_ids: Optional[List[UUID]] = None


class ProjectOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    client_id: Optional[UUID] = None
    budget: Optional[Money] = None
    address: Optional[str] = None
    progress: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    cost_center_ids: List[UUID] = []
    worker_ids: List[UUID] = []
    created_at: Optional[datetime] = None
