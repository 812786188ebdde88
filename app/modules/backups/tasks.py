"""
Background tasks for database backups
"""
from app.core.celery import celery_app
from app.modules.backups.service import BackupService
import logging

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def create_backup(self):
    """Genera un respaldo con pg_dump en BACKUP_DIR"""
    logger.info(f"Starting database backup (task {self.request.id})")
    filename = BackupService().create_backup()
    return {"status": "completed", "filename": filename}
