from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ConflictError, NotFoundError
from app.modules.clients.models import Client
from app.modules.clients.schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self, db: Session):
        self.db = db

    def _check_rut(self, rut: str, tenant_id: UUID, exclude_id: Optional[UUID] = None) -> None:
        query = self.db.query(Client.id).filter(Client.tenant_id == tenant_id, Client.rut == rut)
        if exclude_id:
            query = query.filter(Client.id != exclude_id)
        if query.first():
            raise ConflictError("Ya existe un cliente con este RUT.")

    def list_clients(self, tenant_id: UUID, search: Optional[str] = None) -> List[Client]:
        query = self.db.query(Client).filter(Client.tenant_id == tenant_id)
        if search:
            query = query.filter(or_(
                Client.name.ilike(f"%{search}%"),
                Client.trade_name.ilike(f"%{search}%"),
                Client.rut.ilike(f"%{search}%")
            ))
        return query.order_by(Client.created_at.desc()).all()

    def get_client(self, client_id: UUID, tenant_id: UUID) -> Client:
        client = self.db.query(Client).filter(
            Client.id == client_id,
            Client.tenant_id == tenant_id
        ).first()
        if not client:
            raise NotFoundError("Cliente no encontrado")
        return client

    def create_client(self, client_data: ClientCreate, tenant_id: UUID) -> Client:
        self._check_rut(client_data.rut, tenant_id)
        client = Client(tenant_id=tenant_id, **client_data.model_dump())
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        logger.info(f"Client {client.rut} created for tenant {tenant_id}")
        return client

    def update_client(self, client_id: UUID, client_update: ClientUpdate, tenant_id: UUID) -> Client:
        client = self.get_client(client_id, tenant_id)
        data = client_update.model_dump(exclude_unset=True)

        if data.get("rut") and data["rut"] != client.rut:
            self._check_rut(data["rut"], tenant_id, exclude_id=client.id)

        for field, value in data.items():
            if field in ("rut", "name") and value is None:
                continue
            setattr(client, field, value)

        self.db.commit()
        self.db.refresh(client)
        return client

    def delete_client(self, client_id: UUID, tenant_id: UUID) -> None:
        client = self.get_client(client_id, tenant_id)
        self.db.delete(client)
        self.db.commit()
