from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.daily_reports.service import DailyReportService
from app.modules.daily_reports.schemas import DailyReportCreate, DailyReportOut, DailyReportCreateResponse

router = APIRouter(prefix="/daily-reports", tags=["Daily Reports"])


@router.get("/", response_model=List[DailyReportOut])
def list_daily_reports(
    project_id: Optional[UUID] = Query(None, alias="projectId"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("daily-reports", "read"))
):
    return DailyReportService(db).list_reports(auth_context.tenant_id, project_id)


@router.post("/", response_model=DailyReportCreateResponse, status_code=status.HTTP_201_CREATED)
def create_daily_report(
    data: DailyReportCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("daily-reports", "create"))
):
    """
    Crear reporte diario. Retorna `{report, updatedProject}`; `updatedProject`
    es null si no se informó avance.
    """
    return DailyReportService(db).create_report(data, auth_context.tenant_id, auth_context.user_id)


@router.delete("/{report_id}", response_model=SuccessResponse)
def delete_daily_report(
    report_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("daily-reports", "delete"))
):
    DailyReportService(db).delete_report(report_id, auth_context.tenant_id)
    return SuccessResponse()
