from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.dependencies import require_permission
from app.modules.auth.schemas import AuthContext
from app.modules.clients.service import ClientService
from app.modules.clients.schemas import ClientCreate, ClientUpdate, ClientOut

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("/", response_model=List[ClientOut])
def list_clients(
    search: Optional[str] = Query(None, description="Buscar por razón social o RUT"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("clients", "read"))
):
    return ClientService(db).list_clients(auth_context.tenant_id, search)


@router.post("/", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
def create_client(
    client_data: ClientCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("clients", "create"))
):
    """
    Crear cliente/proveedor. El RUT se valida (módulo 11) y debe ser único en la empresa.
    """
    return ClientService(db).create_client(client_data, auth_context.tenant_id)


@router.get("/{client_id}", response_model=ClientOut)
def get_client(
    client_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("clients", "read"))
):
    return ClientService(db).get_client(client_id, auth_context.tenant_id)


@router.put("/{client_id}", response_model=ClientOut)
def update_client(
    client_id: UUID,
    client_update: ClientUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("clients", "update"))
):
    return ClientService(db).update_client(client_id, client_update, auth_context.tenant_id)


@router.delete("/{client_id}", response_model=SuccessResponse)
def delete_client(
    client_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_permission("clients", "delete"))
):
    ClientService(db).delete_client(client_id, auth_context.tenant_id)
    return SuccessResponse()
