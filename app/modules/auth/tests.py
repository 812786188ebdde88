"""
Tests para autenticación y gestión de usuarios
"""

import jwt
import pytest
from datetime import timedelta

from app.core.config import settings
from app.modules.auth.models import User, UserRole
from app.modules.auth.utils import create_access_token, decode_access_token, hash_password, verify_password
from conftest import create_member, headers_for


class TestPasswordAndTokens:

    def test_hash_and_verify(self):
        hashed = hash_password("secreto123")
        assert hashed != "secreto123"
        assert verify_password("secreto123", hashed)
        assert not verify_password("otra", hashed)
        assert not verify_password("secreto123", "")

    def test_token_roundtrip(self):
        token = create_access_token({"sub": "abc"})
        payload = decode_access_token(token)
        assert payload["sub"] == "abc"
        assert payload["type"] == "access"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)


class TestLogin:

    def test_login_returns_token_and_companies(self, client, admin_user, company):
        response = client.post("/auth/login", json={"email": "ADMIN@obras.cl", "password": "secreto123"})
        assert response.status_code == 200
        data = response.json()
        assert data["tokenType"] == "bearer"
        assert data["user"]["email"] == "admin@obras.cl"
        assert data["user"]["companies"][0]["companyId"] == str(company.id)
        assert decode_access_token(data["accessToken"])["sub"] == str(admin_user.id)

    def test_login_wrong_password(self, client, admin_user):
        response = client.post("/auth/login", json={"email": "admin@obras.cl", "password": "incorrecta"})
        assert response.status_code == 401

    def test_login_unknown_user(self, client):
        response = client.post("/auth/login", json={"email": "nadie@obras.cl", "password": "x"})
        assert response.status_code == 401

    def test_login_inactive_user(self, client, db, admin_user):
        admin_user.is_active = False
        db.commit()
        response = client.post("/auth/login", json={"email": "admin@obras.cl", "password": "secreto123"})
        assert response.status_code == 403

    def test_me(self, client, auth_headers):
        response = client.get("/auth/me", headers={"Authorization": auth_headers["Authorization"]})
        assert response.status_code == 200
        assert response.json()["role"] == "ADMIN"

    def test_me_without_token(self, client):
        assert client.get("/auth/me").status_code in (401, 403)

    def test_me_with_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer no-es-un-jwt"})
        assert response.status_code == 401

    def test_token_signed_with_other_secret(self, client, admin_user):
        token = jwt.encode({"sub": str(admin_user.id)}, "otro-secreto", algorithm=settings.ALGORITHM)
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestUsers:

    def test_admin_creates_user(self, client, auth_headers, db, company):
        response = client.post("/users/", headers=auth_headers, json={
            "email": "Capataz@Obras.cl",
            "name": "Capataz",
            "password": "clave123",
            "role": "SUPERVISOR",
            "allowedSections": ["daily-reports:*", " projects ", ""],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "capataz@obras.cl"
        assert data["allowedSections"] == ["daily-reports:*", "projects"]

        user = db.query(User).filter(User.email == "capataz@obras.cl").one()
        assert user.password != "clave123"
        assert [uc.company_id for uc in user.user_companies] == [company.id]

    def test_duplicate_email(self, client, auth_headers):
        payload = {"email": "dup@obras.cl", "name": "Dup", "password": "clave123"}
        assert client.post("/users/", headers=auth_headers, json=payload).status_code == 201
        assert client.post("/users/", headers=auth_headers, json=payload).status_code == 409

    def test_list_only_company_members(self, client, auth_headers, db, company):
        from app.modules.company.models import Company
        other = Company(name="Otra", rut="11111111-1")
        db.add(other)
        db.commit()
        create_member(db, other, "externo@obras.cl")
        create_member(db, company, "interno@obras.cl")

        emails = {u["email"] for u in client.get("/users/", headers=auth_headers).json()}
        assert emails == {"admin@obras.cl", "interno@obras.cl"}

    def test_update_user_rehashes_password(self, client, auth_headers, db, company):
        user = create_member(db, company, "obrero@obras.cl", role=UserRole.WORKER)
        response = client.put(f"/users/{user.id}", headers=auth_headers, json={
            "password": "nueva123", "role": "USER"
        })
        assert response.status_code == 200
        assert response.json()["role"] == "USER"
        db.refresh(user)
        assert verify_password("nueva123", user.password)

    def test_cannot_delete_self(self, client, auth_headers, admin_user):
        response = client.delete(f"/users/{admin_user.id}", headers=auth_headers)
        assert response.status_code == 400

    def test_delete_user(self, client, auth_headers, db, company):
        user = create_member(db, company, "temporal@obras.cl")
        response = client.delete(f"/users/{user.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.delete(f"/users/{user.id}", headers=auth_headers).status_code == 404

    def test_non_admin_forbidden(self, client, db, company):
        user = create_member(db, company, "usuario@obras.cl", allowed_sections=["clients:*"])
        response = client.get("/users/", headers=headers_for(user, company))
        assert response.status_code == 403
