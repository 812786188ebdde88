"""
Tests para gastos
"""

from uuid import uuid4


def test_create_expense_with_blank_references(client, auth_headers):
    response = client.post("/expenses/", headers=auth_headers, json={
        "description": "Arriendo de andamios",
        "category": "Arriendos",
        "amount": 350000,
        "date": "2024-04-02",
        "projectId": "",
        "costCenterId": "none",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["amount"] == 350000
    assert data["projectId"] is None
    assert data["costCenterId"] is None


def test_amount_must_be_positive(client, auth_headers):
    response = client.post("/expenses/", headers=auth_headers, json={"description": "X", "amount": 0})
    assert response.status_code == 422


def test_unknown_project(client, auth_headers):
    response = client.post("/expenses/", headers=auth_headers, json={
        "description": "X", "amount": 1000, "projectId": str(uuid4())
    })
    assert response.status_code == 404


def test_filters(client, auth_headers):
    project = client.post("/projects/", headers=auth_headers, json={"name": "Casa Quilpué"}).json()
    client.post("/expenses/", headers=auth_headers, json={
        "description": "Cemento", "amount": 90000, "date": "2024-01-15", "projectId": project["id"]
    })
    client.post("/expenses/", headers=auth_headers, json={"description": "Bencina", "amount": 40000, "date": "2024-03-01"})

    by_project = client.get("/expenses/", headers=auth_headers, params={"projectId": project["id"]}).json()
    assert [e["description"] for e in by_project] == ["Cemento"]

    by_date = client.get("/expenses/", headers=auth_headers, params={"dateFrom": "2024-02-01"}).json()
    assert [e["description"] for e in by_date] == ["Bencina"]

    everything = client.get("/expenses/", headers=auth_headers).json()
    assert [e["description"] for e in everything] == ["Bencina", "Cemento"]


def test_update_and_delete(client, auth_headers):
    expense = client.post("/expenses/", headers=auth_headers, json={"description": "Flete", "amount": 25000}).json()

    response = client.put(f"/expenses/{expense['id']}", headers=auth_headers, json={"amount": 30000})
    assert response.status_code == 200
    assert response.json()["amount"] == 30000
    assert response.json()["description"] == "Flete"

    assert client.delete(f"/expenses/{expense['id']}", headers=auth_headers).status_code == 200
    assert client.delete(f"/expenses/{expense['id']}", headers=auth_headers).status_code == 404
