"""
Tests para trabajadores, cuadrillas y cargos
"""

import pytest
from uuid import uuid4


@pytest.fixture
def worker(client, auth_headers):
    return client.post("/workers/", headers=auth_headers, json={
        "rut": "12.345.678-5",
        "name": "Juan Pérez",
        "role": "Jornal",
        "specialty": "Albañilería",
        "experienceYears": 5,
        "certifications": ["Trabajo en altura"],
    }).json()


class TestWorkers:

    def test_create_worker(self, worker):
        assert worker["rut"] == "12345678-5"
        assert worker["experienceYears"] == 5
        assert worker["certifications"] == ["Trabajo en altura"]

    def test_duplicate_rut(self, client, auth_headers, worker):
        response = client.post("/workers/", headers=auth_headers, json={"rut": "12345678-5", "name": "Otro"})
        assert response.status_code == 409

    def test_invalid_rut(self, client, auth_headers):
        response = client.post("/workers/", headers=auth_headers, json={"rut": "1-1", "name": "X"})
        assert response.status_code == 422

    def test_update_and_delete(self, client, auth_headers, worker):
        response = client.put(f"/workers/{worker['id']}", headers=auth_headers, json={"specialty": "Moldajes"})
        assert response.status_code == 200
        assert response.json()["specialty"] == "Moldajes"
        assert response.json()["name"] == "Juan Pérez"

        assert client.delete(f"/workers/{worker['id']}", headers=auth_headers).status_code == 200
        assert client.get("/workers/", headers=auth_headers).json() == []


class TestCrews:

    def test_create_crew_with_workers(self, client, auth_headers, worker):
        project = client.post("/projects/", headers=auth_headers, json={"name": "Condominio"}).json()
        response = client.post("/crews/", headers=auth_headers, json={
            "name": "Cuadrilla A", "role": "Obra gruesa",
            "projectId": project["id"], "workerIds": [worker["id"]],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["workerIds"] == [worker["id"]]
        assert data["workers"][0]["name"] == "Juan Pérez"
        assert data["projectId"] == project["id"]

    def test_unknown_worker(self, client, auth_headers):
        response = client.post("/crews/", headers=auth_headers, json={"name": "B", "workerIds": [str(uuid4())]})
        assert response.status_code == 404

    def test_unknown_project(self, client, auth_headers):
        response = client.post("/crews/", headers=auth_headers, json={"name": "B", "projectId": str(uuid4())})
        assert response.status_code == 404

    def test_update_members(self, client, auth_headers, worker):
        crew = client.post("/crews/", headers=auth_headers, json={"name": "C", "workerIds": [worker["id"]]}).json()
        response = client.put(f"/crews/{crew['id']}", headers=auth_headers, json={"workerIds": []})
        assert response.status_code == 200
        assert response.json()["workerIds"] == []

        assert client.delete(f"/crews/{crew['id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"/crews/{crew['id']}", headers=auth_headers).status_code == 404


class TestJobTitles:

    def test_create_list_and_duplicate(self, client, auth_headers):
        assert client.post("/job-titles/", headers=auth_headers, json={"name": "Capataz"}).status_code == 201
        assert client.post("/job-titles/", headers=auth_headers, json={"name": "Albañil"}).status_code == 201

        response = client.post("/job-titles/", headers=auth_headers, json={"name": " Capataz "})
        assert response.status_code == 409
        assert response.json()["detail"] == "Ya existe el cargo Capataz"

        names = [j["name"] for j in client.get("/job-titles/", headers=auth_headers).json()]
        assert names == ["Albañil", "Capataz"]

    def test_delete(self, client, auth_headers):
        job_title = client.post("/job-titles/", headers=auth_headers, json={"name": "Jornal"}).json()
        assert client.delete(f"/job-titles/{job_title['id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"/job-titles/{job_title['id']}", headers=auth_headers).status_code == 404
