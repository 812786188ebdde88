"""
Tests para materiales y movimientos de inventario
"""

import pytest
from uuid import uuid4


@pytest.fixture
def material(client, auth_headers):
    return client.post("/inventory/materials", headers=auth_headers, json={
        "code": "MAT-001", "name": "Cemento", "unit": "SACO", "minStock": 10
    }).json()


def move(client, headers, material_id, type_, quantity, **extra):
    return client.post("/inventory/movements", headers=headers, json={
        "materialId": material_id, "type": type_, "quantity": quantity, **extra
    })


def test_new_material_starts_empty(material):
    assert material["currentStock"] == 0
    assert material["minStock"] == 10


def test_duplicate_code(client, auth_headers, material):
    response = client.post("/inventory/materials", headers=auth_headers, json={"code": "MAT-001", "name": "Otro"})
    assert response.status_code == 409


def test_in_and_out_movements(client, auth_headers, material):
    response = move(client, auth_headers, material["id"], "IN", 50, notes="Compra OC-1001")
    assert response.status_code == 201
    assert response.json()["description"] == "Compra OC-1001"
    assert response.json()["materialName"] == "Cemento"

    assert move(client, auth_headers, material["id"], "OUT", 45).status_code == 201

    materials = client.get("/inventory/materials", headers=auth_headers).json()
    assert materials[0]["currentStock"] == 5

    low = client.get("/inventory/materials/low-stock", headers=auth_headers).json()
    assert [m["code"] for m in low] == ["MAT-001"]


def test_out_beyond_stock_rejected(client, auth_headers, material):
    move(client, auth_headers, material["id"], "IN", 3)
    response = move(client, auth_headers, material["id"], "OUT", 4)
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Stock insuficiente")

    materials = client.get("/inventory/materials", headers=auth_headers).json()
    assert materials[0]["currentStock"] == 3
    assert len(client.get("/inventory/movements", headers=auth_headers).json()) == 1


def test_unknown_material(client, auth_headers):
    assert move(client, auth_headers, str(uuid4()), "IN", 1).status_code == 404


def test_quantity_must_be_positive(client, auth_headers, material):
    assert move(client, auth_headers, material["id"], "IN", 0).status_code == 422


def test_filter_movements_by_material(client, auth_headers, material):
    other = client.post("/inventory/materials", headers=auth_headers, json={"code": "MAT-002", "name": "Arena"}).json()
    move(client, auth_headers, material["id"], "IN", 1)
    move(client, auth_headers, other["id"], "IN", 2)

    movements = client.get("/inventory/movements", headers=auth_headers, params={"materialId": other["id"]}).json()
    assert [m["materialName"] for m in movements] == ["Arena"]
