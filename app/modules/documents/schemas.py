from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel
from app.modules.documents.models import DocumentType, DocumentStatus


class DocumentCreate(CamelModel):
    """Registro de metadatos de un documento ya alojado (URL externa)"""
    type: DocumentType = DocumentType.OTHER
    reference_id: Optional[str] = Field(None, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    url: str = ""


class DocumentOut(CamelModel):
    id: UUID
    type: DocumentType
    reference_id: Optional[str] = None
    name: str
    url: str
    storage_key: Optional[str] = None
    content_type: Optional[str] = None
    size: Optional[int] = None
    status: DocumentStatus
    created_at: Optional[datetime] = None
