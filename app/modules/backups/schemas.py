from datetime import datetime

from app.common.schemas import CamelModel


class BackupInfo(CamelModel):
    name: str
    size: int
    date: datetime


class BackupQueued(CamelModel):
    task_id: str
    status: str = "queued"
