from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse
from typing import List

from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_admin
from app.modules.auth.schemas import AuthContext
from app.modules.backups.service import BackupService
from app.modules.backups.schemas import BackupInfo, BackupQueued
from app.modules.backups.tasks import create_backup

router = APIRouter(prefix="/admin/backups", tags=["Backups"])


@router.post("/", response_model=BackupQueued, status_code=status.HTTP_202_ACCEPTED)
def queue_backup(auth_context: AuthContext = Depends(require_admin())):
    """Encola un respaldo pg_dump; retorna el id de la tarea."""
    result = create_backup.delay()
    return BackupQueued(task_id=str(result.id))


@router.get("/", response_model=List[BackupInfo])
def list_backups(auth_context: AuthContext = Depends(require_admin())):
    return BackupService().list_backups()


@router.get("/{filename}")
def download_backup(filename: str, auth_context: AuthContext = Depends(require_admin())):
    filepath = BackupService().get_backup_path(filename)
    return FileResponse(filepath, media_type="application/sql", filename=filepath.name)


@router.delete("/{filename}", response_model=SuccessResponse)
def delete_backup(filename: str, auth_context: AuthContext = Depends(require_admin())):
    BackupService().delete_backup(filename)
    return SuccessResponse()
