"""
Celery configuration for background tasks
"""
from celery import Celery

from app.core.config import settings

celery_app = Celery(
    "obras360",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.modules.documents.tasks",
        "app.modules.backups.tasks",
    ]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="America/Santiago",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    result_expires=3600,  # 1 hour

    # Uploads and pg_dump run on separate workers
    task_routes={
        "app.modules.documents.tasks.*": {"queue": "documents"},
        "app.modules.backups.tasks.*": {"queue": "backups"},
    },
)

if __name__ == "__main__":
    celery_app.start()
