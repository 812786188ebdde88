"""
Tests para empresas (tenants)
"""

from app.modules.auth.models import UserCompany, UserRole
from conftest import create_member, headers_for


def bearer(headers):
    return {"Authorization": headers["Authorization"]}


def test_list_my_companies(client, auth_headers, company):
    response = client.get("/companies/", headers=bearer(auth_headers))
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [str(company.id)]


def test_admin_creates_company(client, auth_headers, db, admin_user):
    response = client.post("/companies/", headers=bearer(auth_headers), json={
        "name": "Inmobiliaria Sur",
        "rut": "12.345.678-5",
        "phone": "+56 9 1234 5678",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["rut"] == "12345678-5"
    assert db.query(UserCompany).filter(UserCompany.user_id == admin_user.id).count() == 2


def test_invalid_rut_rejected(client, auth_headers):
    response = client.post("/companies/", headers=bearer(auth_headers), json={
        "name": "Mala", "rut": "12345678-9"
    })
    assert response.status_code == 422


def test_duplicate_rut(client, auth_headers):
    payload = {"name": "Repetida", "rut": "20000003-K"}
    assert client.post("/companies/", headers=bearer(auth_headers), json=payload).status_code == 201
    assert client.post("/companies/", headers=bearer(auth_headers), json=payload).status_code == 409


def test_non_admin_cannot_create(client, db, company):
    user = create_member(db, company, "usuario@obras.cl", role=UserRole.USER)
    headers = bearer(headers_for(user, company))
    response = client.post("/companies/", headers=headers, json={"name": "X", "rut": "11111111-1"})
    assert response.status_code == 403
