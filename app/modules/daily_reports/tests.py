"""
Tests para reportes diarios de obra
"""

import pytest
from uuid import UUID, uuid4

from app.modules.projects.models import Project


@pytest.fixture
def project(client, auth_headers):
    return client.post("/projects/", headers=auth_headers, json={"name": "Edificio Central", "progress": 10}).json()


def test_report_updates_project_progress(client, auth_headers, admin_user, project, db):
    response = client.post("/daily-reports/", headers=auth_headers, json={
        "date": "2024-05-10",
        "content": "Hormigonado losa piso 3",
        "projectId": project["id"],
        "progress": 45,
    })
    assert response.status_code == 201
    data = response.json()
    assert data["report"]["userId"] == str(admin_user.id)
    assert data["report"]["date"] == "2024-05-10"
    assert data["updatedProject"]["progress"] == 45

    stored = db.query(Project).filter(Project.id == UUID(project["id"])).one()
    assert stored.progress == 45


def test_report_without_progress(client, auth_headers, project):
    response = client.post("/daily-reports/", headers=auth_headers, json={
        "content": "Llegada de materiales", "projectId": project["id"]
    })
    assert response.status_code == 201
    assert response.json()["updatedProject"] is None


def test_unknown_project_leaves_nothing(client, auth_headers):
    response = client.post("/daily-reports/", headers=auth_headers, json={
        "content": "X", "projectId": str(uuid4()), "progress": 50
    })
    assert response.status_code == 404
    assert client.get("/daily-reports/", headers=auth_headers).json() == []


def test_unknown_author(client, auth_headers):
    response = client.post("/daily-reports/", headers=auth_headers, json={
        "content": "X", "userId": str(uuid4())
    })
    assert response.status_code == 404


def test_invalid_progress(client, auth_headers, project):
    response = client.post("/daily-reports/", headers=auth_headers, json={
        "content": "X", "projectId": project["id"], "progress": 120
    })
    assert response.status_code == 422


def test_filter_and_delete(client, auth_headers, project):
    client.post("/daily-reports/", headers=auth_headers, json={"content": "Con obra", "projectId": project["id"]})
    report = client.post("/daily-reports/", headers=auth_headers, json={"content": "Sin obra"}).json()["report"]

    filtered = client.get("/daily-reports/", headers=auth_headers, params={"projectId": project["id"]}).json()
    assert [r["content"] for r in filtered] == ["Con obra"]

    assert client.delete(f"/daily-reports/{report['id']}", headers=auth_headers).status_code == 200
    assert client.delete(f"/daily-reports/{report['id']}", headers=auth_headers).status_code == 404
