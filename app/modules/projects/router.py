from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.projects.models import ProjectStatus
from app.modules.projects.service import ProjectService
from app.modules.projects.schemas import ProjectCreate, ProjectUpdate, ProjectOut

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("/", response_model=List[ProjectOut])
def list_projects(
    project_status: Optional[ProjectStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("projects", "read"))
):
    return ProjectService(db).list_projects(
        auth_context.tenant_id, project_status.value if project_status else None
    )


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("projects", "create"))
):
    """
    Crear una obra. Estado inicial ACTIVE y avance 0 si no se indica.
    """
    return ProjectService(db).create_project(data, auth_context.tenant_id)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("projects", "read"))
):
    return ProjectService(db).get_project(project_id, auth_context.tenant_id)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("projects", "update"))
):
    return ProjectService(db).update_project(project_id, data, auth_context.tenant_id)


@router.delete("/{project_id}", response_model=SuccessResponse)
def delete_project(
    project_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("projects", "delete"))
):
    ProjectService(db).delete_project(project_id, auth_context.tenant_id)
    return SuccessResponse()
