from pydantic import Field
from typing import Optional
from uuid import UUID
import datetime

from app.common.schemas import CamelModel
from app.modules.projects.schemas import ProjectOut


class DailyReportCreate(CamelModel):
    user_id: Optional[UUID] = Field(None, description="Autor; por defecto el usuario autenticado")
    date: datetime.date = Field(default_factory=datetime.date.today)
    content: str = Field(..., min_length=1)
    project_id: Optional[UUID] = None
    progress: Optional[int] = Field(None, ge=0, le=100, description="Nuevo avance de la obra")


class DailyReportOut(CamelModel):
    id: UUID
    user_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    date: datetime.date
    content: str
    created_at: Optional[datetime.datetime] = None


class DailyReportCreateResponse(CamelModel):
    report: DailyReportOut
    updated_project: Optional[ProjectOut] = None
