from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.workforce.service import WorkforceService
from app.modules.workforce.schemas import (
    WorkerCreate, WorkerUpdate, WorkerOut,
    CrewCreate, CrewUpdate, CrewOut,
    JobTitleCreate, JobTitleOut
)

workers_router = APIRouter(prefix="/workers", tags=["Workers"])
crews_router = APIRouter(prefix="/crews", tags=["Crews"])
job_titles_router = APIRouter(prefix="/job-titles", tags=["Job Titles"])


# --- WORKERS ---

@workers_router.get("/", response_model=List[WorkerOut])
def list_workers(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "read"))
):
    return WorkforceService(db).list_workers(auth_context.tenant_id)


@workers_router.post("/", response_model=WorkerOut, status_code=status.HTTP_201_CREATED)
def create_worker(
    data: WorkerCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "create"))
):
    return WorkforceService(db).create_worker(data, auth_context.tenant_id)


@workers_router.put("/{worker_id}", response_model=WorkerOut)
def update_worker(
    worker_id: UUID,
    data: WorkerUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "update"))
):
    return WorkforceService(db).update_worker(worker_id, data, auth_context.tenant_id)


@workers_router.delete("/{worker_id}", response_model=SuccessResponse)
def delete_worker(
    worker_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "delete"))
):
    WorkforceService(db).delete_worker(worker_id, auth_context.tenant_id)
    return SuccessResponse()


# --- CREWS ---

@crews_router.get("/", response_model=List[CrewOut])
def list_crews(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "read"))
):
    return WorkforceService(db).list_crews(auth_context.tenant_id)


@crews_router.post("/", response_model=CrewOut, status_code=status.HTTP_201_CREATED)
def create_crew(
    data: CrewCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "create"))
):
    """Crear cuadrilla con sus trabajadores (workerIds)"""
    return WorkforceService(db).create_crew(data, auth_context.tenant_id)


@crews_router.put("/{crew_id}", response_model=CrewOut)
def update_crew(
    crew_id: UUID,
    data: CrewUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "update"))
):
    return WorkforceService(db).update_crew(crew_id, data, auth_context.tenant_id)


@crews_router.delete("/{crew_id}", response_model=SuccessResponse)
def delete_crew(
    crew_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "delete"))
):
    WorkforceService(db).delete_crew(crew_id, auth_context.tenant_id)
    return SuccessResponse()


# --- JOB TITLES ---

@job_titles_router.get("/", response_model=List[JobTitleOut])
def list_job_titles(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "read"))
):
    return WorkforceService(db).list_job_titles(auth_context.tenant_id)


@job_titles_router.post("/", response_model=JobTitleOut, status_code=status.HTTP_201_CREATED)
def create_job_title(
    data: JobTitleCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "create"))
):
    return WorkforceService(db).create_job_title(data, auth_context.tenant_id)


@job_titles_router.delete("/{job_title_id}", response_model=SuccessResponse)
def delete_job_title(
    job_title_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("workers", "delete"))
):
    WorkforceService(db).delete_job_title(job_title_id, auth_context.tenant_id)
    return SuccessResponse()
