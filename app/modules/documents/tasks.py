"""
Background tasks for document storage
"""
from app.core.celery import celery_app
from app.database.database import SessionLocal
from app.modules.documents.models import Document, DocumentStatus
from app.modules.documents.storage import DocumentStorage
from uuid import UUID
import base64
import logging

logger = logging.getLogger(__name__)


def _mark_document(document_id: str, status: str, url: str = None) -> None:
    db = SessionLocal()
    try:
        document = db.query(Document).filter(Document.id == UUID(document_id)).first()
        if document is None:
            logger.warning(f"Document {document_id} no longer exists")
            return
        document.status = status
        if url is not None:
            document.url = url
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@celery_app.task(bind=True)
def upload_document(self, document_id: str, storage_key: str, content_b64: str, content_type: str):
    """
    Sube el archivo a MinIO y marca el documento como UPLOADED (o FAILED).
    El request HTTP ya respondió; esta tarea no se reintenta.
    """
    logger.info(f"Uploading document {document_id} to {storage_key}")
    try:
        storage = DocumentStorage()
        url = storage.upload(storage_key, base64.b64decode(content_b64), content_type)
    except Exception as e:
        logger.error(f"Upload failed for document {document_id}: {e}", exc_info=True)
        _mark_document(document_id, DocumentStatus.FAILED.value)
        return {"status": "failed", "document_id": document_id}

    _mark_document(document_id, DocumentStatus.UPLOADED.value, url)
    logger.info(f"Document {document_id} uploaded")
    return {"status": "uploaded", "document_id": document_id, "url": url}


@celery_app.task
def delete_document_object(storage_key: str):
    """Elimina el objeto de MinIO después de borrar el registro"""
    deleted = DocumentStorage().delete(storage_key)
    return {"status": "deleted" if deleted else "error", "key": storage_key}
