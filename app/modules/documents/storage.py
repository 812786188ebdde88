"""
Almacenamiento de documentos en MinIO (API S3).

El cliente se construye en cada uso (worker o request), nunca como singleton
de módulo.
"""
from minio import Minio
from minio.error import S3Error
from datetime import datetime, timezone
from io import BytesIO
from uuid import UUID
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def generate_document_key(tenant_id: UUID, document_id: UUID, filename: str, now: datetime = None) -> str:
    """Estructura: tenant_id/documents/yyyy/mm/dd/document_id-filename"""
    now = now or datetime.now(timezone.utc)
    safe_name = filename.replace("/", "_").replace("\\", "_")
    return f"{tenant_id}/documents/{now.year}/{now.month:02d}/{now.day:02d}/{document_id}-{safe_name}"


class DocumentStorage:
    """Operaciones sobre el bucket de documentos"""

    def __init__(self):
        self.client = Minio(
            settings.minio_endpoint,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_USE_SSL
        )
        self.bucket_name = settings.MINIO_BUCKET_NAME

    def ensure_bucket(self) -> None:
        if not self.client.bucket_exists(self.bucket_name):
            self.client.make_bucket(self.bucket_name)
            logger.info(f"Created MinIO bucket: {self.bucket_name}")

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Sube el objeto y retorna su URL pública"""
        self.ensure_bucket()
        self.client.put_object(
            self.bucket_name,
            key,
            BytesIO(data),
            length=len(data),
            content_type=content_type or "application/octet-stream"
        )
        return self.public_url(key)

    def public_url(self, key: str) -> str:
        scheme = "https" if settings.MINIO_USE_SSL else "http"
        return f"{scheme}://{settings.minio_public_endpoint}/{self.bucket_name}/{key}"

    def delete(self, key: str) -> bool:
        try:
            self.client.remove_object(self.bucket_name, key)
            return True
        except S3Error as e:
            logger.error(f"MinIO file deletion error: {e}")
            return False
