"""
Tests para centros de costo
"""


def test_create_and_list(client, auth_headers):
    response = client.post("/cost-centers/", headers=auth_headers, json={
        "code": "CC-01", "name": "Obra gruesa", "budget": 15000000
    })
    assert response.status_code == 201
    data = response.json()
    assert data["budget"] == 15000000
    assert data["projectIds"] == []

    listed = client.get("/cost-centers/", headers=auth_headers).json()
    assert [c["code"] for c in listed] == ["CC-01"]


def test_duplicate_code(client, auth_headers):
    payload = {"code": "CC-02", "name": "Terminaciones"}
    assert client.post("/cost-centers/", headers=auth_headers, json=payload).status_code == 201
    response = client.post("/cost-centers/", headers=auth_headers, json=payload)
    assert response.status_code == 409
    assert response.json()["detail"] == "Ya existe un centro de costo con este código."


def test_update_and_delete(client, auth_headers):
    created = client.post("/cost-centers/", headers=auth_headers, json={"code": "CC-03", "name": "Instalaciones"}).json()

    response = client.put(f"/cost-centers/{created['id']}", headers=auth_headers, json={"budget": 500000})
    assert response.status_code == 200
    assert response.json()["budget"] == 500000
    assert response.json()["name"] == "Instalaciones"

    assert client.delete(f"/cost-centers/{created['id']}", headers=auth_headers).status_code == 200
    assert client.delete(f"/cost-centers/{created['id']}", headers=auth_headers).status_code == 404


def test_negative_budget_rejected(client, auth_headers):
    response = client.post("/cost-centers/", headers=auth_headers, json={"code": "X", "name": "X", "budget": -1})
    assert response.status_code == 422
