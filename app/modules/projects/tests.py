"""
Tests para proyectos (obras)
"""

import pytest
from uuid import uuid4


@pytest.fixture
def cost_center(client, auth_headers):
    return client.post("/cost-centers/", headers=auth_headers, json={"code": "CC-10", "name": "General"}).json()


@pytest.fixture
def worker(client, auth_headers):
    return client.post("/workers/", headers=auth_headers, json={
        "rut": "11111111-1", "name": "Pedro Soto", "role": "Maestro"
    }).json()


def test_create_project_with_relations(client, auth_headers, cost_center, worker):
    response = client.post("/projects/", headers=auth_headers, json={
        "name": "Edificio Los Aromos",
        "budget": 250000000,
        "startDate": "2024-03-01",
        "endDate": "2025-06-30",
        "costCenterIds": [cost_center["id"]],
        "workerIds": [worker["id"]],
    })
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "ACTIVE"
    assert data["progress"] == 0
    assert data["costCenterIds"] == [cost_center["id"]]
    assert data["workerIds"] == [worker["id"]]

    centers = client.get("/cost-centers/", headers=auth_headers).json()
    assert centers[0]["projectIds"] == [data["id"]]


def test_unknown_cost_center_is_404(client, auth_headers):
    response = client.post("/projects/", headers=auth_headers, json={
        "name": "Casa", "costCenterIds": [str(uuid4())]
    })
    assert response.status_code == 404


def test_end_before_start_rejected(client, auth_headers):
    response = client.post("/projects/", headers=auth_headers, json={
        "name": "Casa", "startDate": "2024-05-01", "endDate": "2024-04-01"
    })
    assert response.status_code == 422


def test_progress_bounds(client, auth_headers):
    response = client.post("/projects/", headers=auth_headers, json={"name": "Casa", "progress": 101})
    assert response.status_code == 422


def test_update_and_filter_by_status(client, auth_headers, cost_center):
    project = client.post("/projects/", headers=auth_headers, json={
        "name": "Galpón", "costCenterIds": [cost_center["id"]]
    }).json()
    client.post("/projects/", headers=auth_headers, json={"name": "Bodega"})

    response = client.put(f"/projects/{project['id']}", headers=auth_headers, json={
        "status": "COMPLETED", "progress": 100, "costCenterIds": []
    })
    assert response.status_code == 200
    assert response.json()["progress"] == 100
    assert response.json()["costCenterIds"] == []

    completed = client.get("/projects/", headers=auth_headers, params={"status": "COMPLETED"}).json()
    assert [p["name"] for p in completed] == ["Galpón"]


def test_delete_project(client, auth_headers):
    project = client.post("/projects/", headers=auth_headers, json={"name": "Demolición"}).json()
    assert client.delete(f"/projects/{project['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/projects/{project['id']}", headers=auth_headers).status_code == 404
