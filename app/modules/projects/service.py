from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import NotFoundError, ValidationError
from app.modules.projects.models import Project
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate
from app.modules.clients.models import Client
from app.modules.cost_centers.models import CostCenter
from app.modules.workforce.models import Worker

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def _load_many(self, model, ids: List[UUID], tenant_id: UUID, label: str):
        """Cargar entidades relacionadas de la misma empresa; ids desconocidos son 404"""
        if not ids:
            return []
        unique_ids = set(ids)
        rows = self.db.query(model).filter(model.id.in_(unique_ids), model.tenant_id == tenant_id).all()
        if len(rows) != len(unique_ids):
            raise NotFoundError(f"{label} no encontrado")
        return rows

    def _check_client(self, client_id: Optional[UUID], tenant_id: UUID) -> None:
        if client_id and not self.db.query(Client.id).filter(
            Client.id == client_id, Client.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Cliente no encontrado")

    def list_projects(self, tenant_id: UUID, status: Optional[str] = None) -> List[Project]:
        query = self.db.query(Project).options(
            selectinload(Project.cost_centers),
            selectinload(Project.workers)
        ).filter(Project.tenant_id == tenant_id)
        if status:
            query = query.filter(Project.status == status)
        return query.order_by(Project.created_at.desc()).all()

    def get_project(self, project_id: UUID, tenant_id: UUID, lock: bool = False) -> Project:
        query = self.db.query(Project).filter(
            Project.id == project_id,
            Project.tenant_id == tenant_id
        )
        if lock:
            query = query.with_for_update()
        project = query.first()
        if not project:
            raise NotFoundError("Proyecto no encontrado")
        return project

    def create_project(self, data: ProjectCreate, tenant_id: UUID) -> Project:
        self._check_client(data.client_id, tenant_id)
        fields = data.model_dump(exclude={"cost_center_ids", "worker_ids"})
        fields["status"] = data.status.value

        project = Project(tenant_id=tenant_id, **fields)
        project.cost_centers = self._load_many(CostCenter, data.cost_center_ids, tenant_id, "Centro de costo")
        project.workers = self._load_many(Worker, data.worker_ids, tenant_id, "Trabajador")

        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"Project {project.name} created for tenant {tenant_id}")
        return project

    def update_project(self, project_id: UUID, data: ProjectUpdate, tenant_id: UUID) -> Project:
        project = self.get_project(project_id, tenant_id)
        changes = data.model_dump(exclude_unset=True)

        if "client_id" in changes:
            self._check_client(changes["client_id"], tenant_id)
        if "cost_center_ids" in changes:
            project.cost_centers = self._load_many(
                CostCenter, changes.pop("cost_center_ids") or [], tenant_id, "Centro de costo"
            )
        if "worker_ids" in changes:
            project.workers = self._load_many(Worker, changes.pop("worker_ids") or [], tenant_id, "Trabajador")

        for field, value in changes.items():
            if field in ("name", "status", "progress", "budget") and value is None:
                continue
            if field == "status":
                value = value.value
            setattr(project, field, value)

        if project.start_date and project.end_date and project.end_date < project.start_date:
            raise ValidationError("La fecha de término no puede ser anterior a la de inicio")

        self.db.commit()
        self.db.refresh(project)
        return project

    def delete_project(self, project_id: UUID, tenant_id: UUID) -> None:
        project = self.get_project(project_id, tenant_id)
        self.db.delete(project)
        self.db.commit()
