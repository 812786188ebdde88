"""
Tests para órdenes de compra
"""

import pytest
from uuid import uuid4


@pytest.fixture
def order_payload():
    return {
        "number": "OC-1001",
        "provider": "Sodimac Constructor",
        "date": "2024-02-20",
        "items": [
            {"description": "Saco cemento 25kg", "quantity": 40, "unitPrice": 4990},
            {"description": "Fierro 12mm", "quantity": 2.5, "unitPrice": 10000},
        ],
    }


def test_create_order_computes_totals(client, auth_headers, order_payload):
    project = client.post("/projects/", headers=auth_headers, json={"name": "Loteo Norte"}).json()
    order_payload["projectId"] = project["id"]

    response = client.post("/purchase-orders/", headers=auth_headers, json=order_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "DRAFT"
    assert [item["total"] for item in data["items"]] == [199600, 25000]
    assert data["totalAmount"] == 224600
    assert data["projectName"] == "Loteo Norte"


def test_requires_items(client, auth_headers, order_payload):
    order_payload["items"] = []
    assert client.post("/purchase-orders/", headers=auth_headers, json=order_payload).status_code == 422


def test_duplicate_number(client, auth_headers, order_payload):
    assert client.post("/purchase-orders/", headers=auth_headers, json=order_payload).status_code == 201
    response = client.post("/purchase-orders/", headers=auth_headers, json=order_payload)
    assert response.status_code == 409
    assert response.json()["detail"] == "Ya existe la orden de compra OC-1001"


def test_unknown_project(client, auth_headers, order_payload):
    order_payload["projectId"] = str(uuid4())
    assert client.post("/purchase-orders/", headers=auth_headers, json=order_payload).status_code == 404


def test_get_list_and_delete(client, auth_headers, order_payload):
    order = client.post("/purchase-orders/", headers=auth_headers, json=order_payload).json()

    assert client.get(f"/purchase-orders/{order['id']}", headers=auth_headers).json()["number"] == "OC-1001"
    assert len(client.get("/purchase-orders/", headers=auth_headers).json()) == 1

    assert client.delete(f"/purchase-orders/{order['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/purchase-orders/{order['id']}", headers=auth_headers).status_code == 404
