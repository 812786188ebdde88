"""
Fixtures compartidos para los tests de los módulos.

Los tests corren contra SQLite en memoria; las variables de entorno deben
quedar definidas antes de importar la aplicación.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.database import Base, engine, SessionLocal
from app.modules.auth.models import User, UserCompany, UserRole
from app.modules.auth.utils import hash_password, create_access_token
from app.modules.company.models import Company


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def company(db):
    company = Company(name="Constructora Andes SpA", rut="76.086.428-5", address="Av. Apoquindo 1234")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def create_member(db, company, email, role=UserRole.USER, allowed_sections=None, password="secreto123"):
    user = User(
        email=email,
        name=email.split("@")[0].title(),
        password=hash_password(password),
        role=role.value,
        allowed_sections=allowed_sections or [],
    )
    db.add(user)
    db.flush()
    db.add(UserCompany(user_id=user.id, company_id=company.id))
    db.commit()
    db.refresh(user)
    return user


def headers_for(user, company):
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {
        "Authorization": f"Bearer {token}",
        "X-Company-ID": str(company.id),
    }


@pytest.fixture
def admin_user(db, company):
    return create_member(db, company, "admin@obras.cl", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(admin_user, company):
    return headers_for(admin_user, company)
