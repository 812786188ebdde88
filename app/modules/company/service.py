from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from app.common.exceptions import ConflictError
from app.modules.auth.models import User, UserCompany, UserRole
from app.modules.company.models import Company
from app.modules.company.schemas import CompanyCreate

logger = logging.getLogger(__name__)


def get_companies_for_user(db: Session, user: User) -> List[Company]:
    """
    Empresas activas a las que pertenece el usuario.
    """
    return db.query(Company).join(UserCompany).filter(
        UserCompany.user_id == user.id,
        UserCompany.is_active.is_(True),
        Company.is_active.is_(True)
    ).order_by(Company.name).all()


def create_company(db: Session, company_data: CompanyCreate, current_user: User) -> Company:
    """
    Crear una empresa y asociar al usuario que la crea.

    Args:
        company_data (CompanyCreate): datos de la empresa.
        current_user (User): usuario ADMIN que la crea.
    """
    if current_user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requiere rol de administrador"
        )

    if db.query(Company).filter(Company.rut == company_data.rut).first():
        raise ConflictError(f"Ya existe una empresa con RUT {company_data.rut}")

    company = Company(**company_data.model_dump())
    db.add(company)
    db.flush()

    db.add(UserCompany(user_id=current_user.id, company_id=company.id, is_active=True))
    db.commit()
    db.refresh(company)

    logger.info(f"Company {company.name} ({company.id}) created by {current_user.email}")
    return company
