from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database.database import get_db
from app.modules.company import service
from app.modules.company.schemas import CompanyCreate, CompanyOut
from app.modules.auth.dependencies import get_current_user
from app.modules.auth.models import User


company_router = APIRouter(prefix="/companies", tags=["Companies"])


@company_router.get("/", response_model=List[CompanyOut])
def get_my_companies(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    Empresas del usuario actual (no requiere X-Company-ID).
    """
    return service.get_companies_for_user(db, current_user)


@company_router.post("/", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company(
    company: CompanyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Crear empresa (solo ADMIN). El usuario queda asociado a la nueva empresa.
    """
    return service.create_company(db, company, current_user)
