"""
Tests para el módulo de Clientes

Valida RUT chileno, alias en español del frontend y aislamiento por empresa.
"""

import pytest

from app.modules.company.models import Company
from app.modules.clients.models import Client
from conftest import create_member, headers_for


@pytest.fixture
def sample_client_data():
    return {
        "rut": "12.345.678-5",
        "razonSocial": "Ferretería El Roble Ltda.",
        "nombreComercial": "El Roble",
        "email": "ventas@elroble.cl",
        "telefono": "+56 9 8765 4321",
        "notas": "Proveedor de madera",
    }


class TestClientCrud:

    def test_create_with_spanish_aliases(self, client, auth_headers, sample_client_data):
        response = client.post("/clients/", headers=auth_headers, json=sample_client_data)
        assert response.status_code == 201
        data = response.json()
        assert data["rut"] == "12345678-5"
        assert data["name"] == "Ferretería El Roble Ltda."
        assert data["razonSocial"] == data["name"]
        assert data["nombreComercial"] == "El Roble"
        assert data["telefono"] == "+56 9 8765 4321"
        assert data["notes"] == "Proveedor de madera"

    def test_create_with_english_names(self, client, auth_headers):
        response = client.post("/clients/", headers=auth_headers, json={
            "rut": "11111111-1", "name": "Arenas SpA", "email": ""
        })
        assert response.status_code == 201
        data = response.json()
        assert data["email"] is None
        # Sin nombre comercial se usa la razón social
        assert data["nombreComercial"] == "Arenas SpA"

    def test_invalid_rut(self, client, auth_headers, sample_client_data):
        sample_client_data["rut"] = "12345678-0"
        response = client.post("/clients/", headers=auth_headers, json=sample_client_data)
        assert response.status_code == 422

    def test_duplicate_rut_in_company(self, client, auth_headers, sample_client_data):
        assert client.post("/clients/", headers=auth_headers, json=sample_client_data).status_code == 201
        sample_client_data["rut"] = "12345678-5"
        response = client.post("/clients/", headers=auth_headers, json=sample_client_data)
        assert response.status_code == 409
        assert response.json()["detail"] == "Ya existe un cliente con este RUT."

    def test_same_rut_in_other_company(self, client, auth_headers, db, sample_client_data):
        other = Company(name="Otra Constructora", rut="20000003-K")
        db.add(other)
        db.commit()
        user = create_member(db, other, "otro@obras.cl", allowed_sections=["clients:*"])

        assert client.post("/clients/", headers=auth_headers, json=sample_client_data).status_code == 201
        response = client.post("/clients/", headers=headers_for(user, other), json=sample_client_data)
        assert response.status_code == 201

        # Cada empresa ve solo sus clientes
        assert len(client.get("/clients/", headers=headers_for(user, other)).json()) == 1

    def test_search(self, client, auth_headers, sample_client_data):
        client.post("/clients/", headers=auth_headers, json=sample_client_data)
        client.post("/clients/", headers=auth_headers, json={"rut": "11111111-1", "name": "Áridos Maipo"})

        found = client.get("/clients/", headers=auth_headers, params={"search": "roble"}).json()
        assert [c["rut"] for c in found] == ["12345678-5"]

        found = client.get("/clients/", headers=auth_headers, params={"search": "11111111"}).json()
        assert [c["name"] for c in found] == ["Áridos Maipo"]

    def test_update_and_delete(self, client, auth_headers, sample_client_data, db):
        created = client.post("/clients/", headers=auth_headers, json=sample_client_data).json()

        response = client.put(f"/clients/{created['id']}", headers=auth_headers, json={"razonSocial": "El Roble SpA"})
        assert response.status_code == 200
        assert response.json()["name"] == "El Roble SpA"
        assert response.json()["rut"] == "12345678-5"

        assert client.delete(f"/clients/{created['id']}", headers=auth_headers).status_code == 200
        assert db.query(Client).count() == 0
        assert client.get(f"/clients/{created['id']}", headers=auth_headers).status_code == 404

    def test_update_to_existing_rut(self, client, auth_headers, sample_client_data):
        client.post("/clients/", headers=auth_headers, json=sample_client_data)
        other = client.post("/clients/", headers=auth_headers, json={"rut": "11111111-1", "name": "Otro"}).json()
        response = client.put(f"/clients/{other['id']}", headers=auth_headers, json={"rut": "12345678-5"})
        assert response.status_code == 409


class TestClientPermissions:

    def test_requires_token(self, client, company):
        response = client.get("/clients/", headers={"X-Company-ID": str(company.id)})
        assert response.status_code in (401, 403)

    def test_read_only_user(self, client, db, company, sample_client_data):
        user = create_member(db, company, "lector@obras.cl", allowed_sections=["clients:read"])
        headers = headers_for(user, company)
        assert client.get("/clients/", headers=headers).status_code == 200
        assert client.post("/clients/", headers=headers, json=sample_client_data).status_code == 403
