"""
Tests para documentos: metadatos, subida en segundo plano y claves de MinIO
"""

import base64
import pytest
from datetime import datetime
from uuid import UUID, uuid4

from app.modules.documents import service as document_service
from app.modules.documents import tasks as document_tasks
from app.modules.documents.models import Document
from app.modules.documents.storage import generate_document_key


class FakeTask:
    """Registra las llamadas a .delay() en lugar de encolarlas"""

    def __init__(self):
        self.calls = []

    def delay(self, *args):
        self.calls.append(args)


@pytest.fixture
def queued(monkeypatch):
    upload, delete = FakeTask(), FakeTask()
    monkeypatch.setattr(document_service, "upload_document", upload)
    monkeypatch.setattr(document_service, "delete_document_object", delete)
    return {"upload": upload, "delete": delete}


class FakeStorage:
    uploaded = {}

    def upload(self, key, data, content_type):
        FakeStorage.uploaded[key] = data
        return f"http://localhost:9000/obras360/{key}"


class BrokenStorage:
    def upload(self, key, data, content_type):
        raise ConnectionError("MinIO no disponible")


def test_document_key_layout():
    tenant_id, document_id = uuid4(), uuid4()
    key = generate_document_key(tenant_id, document_id, "planos/piso 1.pdf", now=datetime(2024, 3, 7))
    assert key == f"{tenant_id}/documents/2024/03/07/{document_id}-planos_piso 1.pdf"


def test_create_metadata_document(client, auth_headers, queued):
    response = client.post("/documents/", headers=auth_headers, json={
        "type": "CONTRACT", "referenceId": "PRJ-1", "name": "Contrato.pdf", "url": "https://example.com/c.pdf"
    })
    assert response.status_code == 201
    assert response.json()["status"] == "UPLOADED"
    assert queued["upload"].calls == []


def test_upload_queues_task(client, auth_headers, queued, company):
    response = client.post(
        "/documents/upload",
        headers=auth_headers,
        files={"file": ("factura.pdf", b"%PDF-1.4 contenido", "application/pdf")},
        data={"type": "INVOICE", "referenceId": "F-100"},
    )
    assert response.status_code == 202
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["name"] == "factura.pdf"
    assert data["size"] == len(b"%PDF-1.4 contenido")
    assert data["storageKey"].startswith(f"{company.id}/documents/")
    assert data["storageKey"].endswith(f"{data['id']}-factura.pdf")

    (document_id, storage_key, content_b64, content_type), = queued["upload"].calls
    assert document_id == data["id"]
    assert base64.b64decode(content_b64) == b"%PDF-1.4 contenido"
    assert content_type == "application/pdf"

    listed = client.get("/documents/", headers=auth_headers, params={"referenceId": "F-100"}).json()
    assert [d["id"] for d in listed] == [data["id"]]


def test_upload_rejects_content_type(client, auth_headers, queued):
    response = client.post(
        "/documents/upload",
        headers=auth_headers,
        files={"file": ("script.sh", b"echo", "application/x-sh")},
    )
    assert response.status_code == 400
    assert queued["upload"].calls == []


def test_upload_rejects_oversized(client, auth_headers, queued, monkeypatch):
    monkeypatch.setattr(document_service.settings, "MAX_FILE_SIZE", 4)
    response = client.post(
        "/documents/upload",
        headers=auth_headers,
        files={"file": ("datos.csv", b"a,b,c\n", "text/csv")},
    )
    assert response.status_code == 400


def test_delete_removes_stored_object(client, auth_headers, queued):
    uploaded = client.post(
        "/documents/upload",
        headers=auth_headers,
        files={"file": ("foto.png", b"\x89PNG", "image/png")},
    ).json()

    assert client.delete(f"/documents/{uploaded['id']}", headers=auth_headers).status_code == 200
    assert queued["delete"].calls == [(uploaded["storageKey"],)]
    assert client.delete(f"/documents/{uploaded['id']}", headers=auth_headers).status_code == 404


def test_upload_task_marks_document(client, auth_headers, queued, db, monkeypatch):
    uploaded = client.post(
        "/documents/upload",
        headers=auth_headers,
        files={"file": ("plano.pdf", b"%PDF", "application/pdf")},
    ).json()
    args = queued["upload"].calls[0]

    monkeypatch.setattr(document_tasks, "DocumentStorage", FakeStorage)
    result = document_tasks.upload_document.apply(args=args).get()
    assert result["status"] == "uploaded"

    document = db.query(Document).filter(Document.id == UUID(uploaded["id"])).one()
    assert document.status == "UPLOADED"
    assert document.url.endswith(uploaded["storageKey"])
    assert FakeStorage.uploaded[uploaded["storageKey"]] == b"%PDF"


def test_upload_task_failure(client, auth_headers, queued, db, monkeypatch):
    uploaded = client.post(
        "/documents/upload",
        headers=auth_headers,
        files={"file": ("plano.pdf", b"%PDF", "application/pdf")},
    ).json()

    monkeypatch.setattr(document_tasks, "DocumentStorage", BrokenStorage)
    result = document_tasks.upload_document.apply(args=queued["upload"].calls[0]).get()
    assert result["status"] == "failed"

    document = db.query(Document).filter(Document.id == UUID(uploaded["id"])).one()
    assert document.status == "FAILED"
