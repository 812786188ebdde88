from fastapi import APIRouter, Depends, status, Query, UploadFile, File, Form
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.documents.models import DocumentType
from app.modules.documents.service import DocumentService
from app.modules.documents.schemas import DocumentCreate, DocumentOut

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get("/", response_model=List[DocumentOut])
def list_documents(
    document_type: Optional[DocumentType] = Query(None, alias="type"),
    reference_id: Optional[str] = Query(None, alias="referenceId"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("documents", "read"))
):
    return DocumentService(db).list_documents(auth_context.tenant_id, document_type, reference_id)


@router.post("/", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
def create_document(
    data: DocumentCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("documents", "create"))
):
    """Registrar solo metadatos (la URL ya existe)"""
    return DocumentService(db).create_document(data, auth_context.tenant_id, auth_context.user_id)


@router.post("/upload", response_model=DocumentOut, status_code=status.HTTP_202_ACCEPTED)
async def upload_document(
    file: UploadFile = File(...),
    document_type: DocumentType = Form(DocumentType.OTHER, alias="type"),
    reference_id: Optional[str] = Form(None, alias="referenceId"),
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("documents", "create"))
):
    """
    Subir un archivo. El documento queda PENDING y la subida a MinIO se
    procesa en segundo plano; luego pasa a UPLOADED (con URL) o FAILED.
    """
    return await DocumentService(db).upload_document(
        file, document_type, reference_id, name, auth_context.tenant_id, auth_context.user_id
    )


@router.delete("/{document_id}", response_model=SuccessResponse)
def delete_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("documents", "delete"))
):
    DocumentService(db).delete_document(document_id, auth_context.tenant_id)
    return SuccessResponse()
