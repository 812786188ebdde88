from fastapi import UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID, uuid4
import base64
import logging

from app.core.config import settings
from app.common.exceptions import NotFoundError, ValidationError
from app.modules.documents.models import Document, DocumentType, DocumentStatus
from app.modules.documents.schemas import DocumentCreate
from app.modules.documents.storage import generate_document_key
from app.modules.documents.tasks import upload_document, delete_document_object

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(self, db: Session):
        self.db = db

    def list_documents(
        self,
        tenant_id: UUID,
        document_type: Optional[DocumentType] = None,
        reference_id: Optional[str] = None
    ) -> List[Document]:
        query = self.db.query(Document).filter(Document.tenant_id == tenant_id)
        if document_type:
            query = query.filter(Document.type == document_type.value)
        if reference_id:
            query = query.filter(Document.reference_id == reference_id)
        return query.order_by(Document.created_at.desc()).all()

    def create_document(self, data: DocumentCreate, tenant_id: UUID, user_id: UUID) -> Document:
        document = Document(
            tenant_id=tenant_id,
            type=data.type.value,
            reference_id=data.reference_id,
            name=data.name,
            url=data.url,
            status=DocumentStatus.UPLOADED.value,
            uploaded_by=user_id
        )
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        return document

    async def upload_document(
        self,
        file: UploadFile,
        document_type: DocumentType,
        reference_id: Optional[str],
        name: Optional[str],
        tenant_id: UUID,
        user_id: UUID
    ) -> Document:
        """
        Crea el documento en estado PENDING y encola la subida a MinIO.
        """
        content_type = file.content_type or "application/octet-stream"
        if content_type not in settings.ALLOWED_FILE_TYPES:
            raise ValidationError(f"Tipo de archivo {content_type} no permitido")

        content = await file.read()
        if not content:
            raise ValidationError("El archivo está vacío")
        if len(content) > settings.MAX_FILE_SIZE:
            raise ValidationError(
                f"El archivo excede el tamaño máximo de {settings.MAX_FILE_SIZE // (1024 * 1024)}MB"
            )

        document_id = uuid4()
        filename = file.filename or "archivo"
        storage_key = generate_document_key(tenant_id, document_id, filename)

        document = Document(
            id=document_id,
            tenant_id=tenant_id,
            type=document_type.value,
            reference_id=reference_id,
            name=name or filename,
            url="",
            storage_key=storage_key,
            content_type=content_type,
            size=len(content),
            status=DocumentStatus.PENDING.value,
            uploaded_by=user_id
        )
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)

        upload_document.delay(
            str(document.id), storage_key, base64.b64encode(content).decode("ascii"), content_type
        )
        logger.info(f"Upload of document {document.id} queued ({len(content)} bytes)")
        return document

    def delete_document(self, document_id: UUID, tenant_id: UUID) -> None:
        document = self.db.query(Document).filter(
            Document.id == document_id,
            Document.tenant_id == tenant_id
        ).first()
        if not document:
            raise NotFoundError("Documento no encontrado")

        storage_key = document.storage_key
        self.db.delete(document)
        self.db.commit()

        if storage_key:
            delete_document_object.delay(storage_key)
