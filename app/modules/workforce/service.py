from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ConflictError, NotFoundError
from app.modules.workforce.models import Worker, Crew, JobTitle
from app.modules.workforce.schemas import (
    WorkerCreate, WorkerUpdate, CrewCreate, CrewUpdate, JobTitleCreate
)
from app.modules.projects.models import Project

logger = logging.getLogger(__name__)


class WorkforceService:
    """Trabajadores, cuadrillas y cargos de la empresa."""

    def __init__(self, db: Session):
        self.db = db

    # Workers

    def list_workers(self, tenant_id: UUID) -> List[Worker]:
        return self.db.query(Worker).filter(Worker.tenant_id == tenant_id).order_by(Worker.name).all()

    def get_worker(self, worker_id: UUID, tenant_id: UUID) -> Worker:
        worker = self.db.query(Worker).filter(
            Worker.id == worker_id,
            Worker.tenant_id == tenant_id
        ).first()
        if not worker:
            raise NotFoundError("Trabajador no encontrado")
        return worker

    def create_worker(self, data: WorkerCreate, tenant_id: UUID) -> Worker:
        if self.db.query(Worker.id).filter(Worker.tenant_id == tenant_id, Worker.rut == data.rut).first():
            raise ConflictError(f"Ya existe un trabajador con RUT {data.rut}")

        worker = Worker(tenant_id=tenant_id, **data.model_dump())
        self.db.add(worker)
        self.db.commit()
        self.db.refresh(worker)
        return worker

    def update_worker(self, worker_id: UUID, data: WorkerUpdate, tenant_id: UUID) -> Worker:
        worker = self.get_worker(worker_id, tenant_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("name", "certifications") and value is None:
                continue
            setattr(worker, field, value)
        self.db.commit()
        self.db.refresh(worker)
        return worker

    def delete_worker(self, worker_id: UUID, tenant_id: UUID) -> None:
        worker = self.get_worker(worker_id, tenant_id)
        self.db.delete(worker)
        self.db.commit()

    # Crews

    def _load_workers(self, worker_ids: List[UUID], tenant_id: UUID) -> List[Worker]:
        if not worker_ids:
            return []
        unique_ids = set(worker_ids)
        workers = self.db.query(Worker).filter(
            Worker.id.in_(unique_ids),
            Worker.tenant_id == tenant_id
        ).all()
        if len(workers) != len(unique_ids):
            raise NotFoundError("Trabajador no encontrado")
        return workers

    def _check_project(self, project_id: Optional[UUID], tenant_id: UUID) -> None:
        if project_id and not self.db.query(Project.id).filter(
            Project.id == project_id, Project.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Proyecto no encontrado")

    def list_crews(self, tenant_id: UUID) -> List[Crew]:
        return self.db.query(Crew).options(
            selectinload(Crew.workers)
        ).filter(Crew.tenant_id == tenant_id).order_by(Crew.name).all()

    def get_crew(self, crew_id: UUID, tenant_id: UUID) -> Crew:
        crew = self.db.query(Crew).filter(Crew.id == crew_id, Crew.tenant_id == tenant_id).first()
        if not crew:
            raise NotFoundError("Cuadrilla no encontrada")
        return crew

    def create_crew(self, data: CrewCreate, tenant_id: UUID) -> Crew:
        self._check_project(data.project_id, tenant_id)
        crew = Crew(
            tenant_id=tenant_id,
            name=data.name,
            role=data.role,
            project_id=data.project_id,
            workers=self._load_workers(data.worker_ids, tenant_id)
        )
        self.db.add(crew)
        self.db.commit()
        self.db.refresh(crew)
        return crew

    def update_crew(self, crew_id: UUID, data: CrewUpdate, tenant_id: UUID) -> Crew:
        crew = self.get_crew(crew_id, tenant_id)
        changes = data.model_dump(exclude_unset=True)

        if "project_id" in changes:
            self._check_project(changes["project_id"], tenant_id)
        if "worker_ids" in changes:
            crew.workers = self._load_workers(changes.pop("worker_ids") or [], tenant_id)

        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(crew, field, value)

        self.db.commit()
        self.db.refresh(crew)
        return crew

    def delete_crew(self, crew_id: UUID, tenant_id: UUID) -> None:
        crew = self.get_crew(crew_id, tenant_id)
        self.db.delete(crew)
        self.db.commit()

    # Job titles

    def list_job_titles(self, tenant_id: UUID) -> List[JobTitle]:
        return self.db.query(JobTitle).filter(JobTitle.tenant_id == tenant_id).order_by(JobTitle.name).all()

    def create_job_title(self, data: JobTitleCreate, tenant_id: UUID) -> JobTitle:
        name = data.name.strip()
        if self.db.query(JobTitle.id).filter(JobTitle.tenant_id == tenant_id, JobTitle.name == name).first():
            raise ConflictError(f"Ya existe el cargo {name}")

        job_title = JobTitle(tenant_id=tenant_id, name=name, description=data.description)
        self.db.add(job_title)
        self.db.commit()
        self.db.refresh(job_title)
        return job_title

    def delete_job_title(self, job_title_id: UUID, tenant_id: UUID) -> None:
        job_title = self.db.query(JobTitle).filter(
            JobTitle.id == job_title_id,
            JobTitle.tenant_id == tenant_id
        ).first()
        if not job_title:
            raise NotFoundError("Cargo no encontrado")
        self.db.delete(job_title)
        self.db.commit()
