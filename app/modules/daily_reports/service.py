from fastapi import HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import NotFoundError, TransactionFailure
from app.modules.auth.models import UserCompany
from app.modules.daily_reports.models import DailyReport
from app.modules.daily_reports.schemas import DailyReportCreate
from app.modules.projects.models import Project

logger = logging.getLogger(__name__)


class DailyReportService:
    def __init__(self, db: Session):
        self.db = db

    def list_reports(self, tenant_id: UUID, project_id: Optional[UUID] = None) -> List[DailyReport]:
        query = self.db.query(DailyReport).filter(DailyReport.tenant_id == tenant_id)
        if project_id:
            query = query.filter(DailyReport.project_id == project_id)
        return query.order_by(DailyReport.date.desc(), DailyReport.created_at.desc()).all()

    def create_report(self, data: DailyReportCreate, tenant_id: UUID, current_user_id: UUID) -> dict:
        """
        Crear reporte diario. Si trae proyecto y avance, el avance del proyecto
        se actualiza en la misma transacción.
        """
        try:
            user_id = data.user_id or current_user_id
            if data.user_id and not self.db.query(UserCompany.id).filter(
                UserCompany.user_id == data.user_id,
                UserCompany.company_id == tenant_id
            ).first():
                raise NotFoundError("Usuario no encontrado")

            project = None
            if data.project_id:
                project = self.db.query(Project).filter(
                    Project.id == data.project_id,
                    Project.tenant_id == tenant_id
                ).with_for_update().first()
                if not project:
                    raise NotFoundError("Proyecto no encontrado")

            report = DailyReport(
                tenant_id=tenant_id,
                user_id=user_id,
                project_id=data.project_id,
                date=data.date,
                content=data.content
            )
            self.db.add(report)

            updated_project = None
            if project is not None and data.progress is not None:
                project.progress = data.progress
                updated_project = project

            self.db.commit()
            self.db.refresh(report)
            if updated_project is not None:
                self.db.refresh(updated_project)
                logger.info(f"Project {updated_project.id} progress set to {updated_project.progress}%")

            return {"report": report, "updated_project": updated_project}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating daily report: {e}", exc_info=True)
            raise TransactionFailure("Error creando el reporte diario")

    def delete_report(self, report_id: UUID, tenant_id: UUID) -> None:
        report = self.db.query(DailyReport).filter(
            DailyReport.id == report_id,
            DailyReport.tenant_id == tenant_id
        ).first()
        if not report:
            raise NotFoundError("Reporte no encontrado")
        self.db.delete(report)
        self.db.commit()
