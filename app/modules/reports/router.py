from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import datetime

from app.database.database import get_db
from app.modules.auth.dependencies import AuthDependencies
from app.modules.auth.schemas import AuthContext
from app.modules.reports.service import ReportService
from app.modules.reports.schemas import (
    SummaryReport, AgingReport, CashFlowReport, TopEntity, TopEntityKind
)
from app.modules.reports.utils import create_csv_response, CSV_HEADERS

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=SummaryReport)
def get_summary(
    date_from: Optional[datetime.date] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime.date] = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("reports", "read"))
):
    """Resumen de ventas, compras, notas, cuentas por cobrar y recaudado del periodo."""
    if date_from and date_to and date_to < date_from:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="dateTo debe ser mayor o igual a dateFrom"
        )
    service = ReportService(db, auth_context.tenant_id)
    return service.get_summary(date_from, date_to)


@router.get("/aging", response_model=AgingReport)
def get_aging(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("reports", "read"))
):
    service = ReportService(db, auth_context.tenant_id)
    return service.get_aging()


@router.get("/cash-flow", response_model=CashFlowReport)
def get_cash_flow(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Formato de exportación: csv"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("reports", "read"))
):
    """Ingresos y egresos mensuales del año (por defecto, el año en curso)."""
    year = year or datetime.date.today().year
    months = ReportService(db, auth_context.tenant_id).get_cash_flow(year)
    if export == "csv":
        return create_csv_response(months, f"flujo_caja_{year}.csv", CSV_HEADERS["cash_flow"])
    return {"year": year, "months": months}


@router.get("/top-entities", response_model=List[TopEntity])
def get_top_entities(
    kind: TopEntityKind = Query(TopEntityKind.CLIENTS),
    limit: int = Query(5, ge=1, le=50),
    export: Optional[str] = Query(None, pattern="^(csv)$"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(AuthDependencies.require_permission("reports", "read"))
):
    entities = ReportService(db, auth_context.tenant_id).get_top_entities(kind.value, limit)
    if export == "csv":
        return create_csv_response(
            entities, f"top_{kind.value.lower()}.csv", CSV_HEADERS["top_entities"]
        )
    return entities
