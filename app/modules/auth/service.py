from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from typing import List
from uuid import UUID
from datetime import datetime, timezone
import logging

from app.common.exceptions import ConflictError, NotFoundError, TransactionFailure, ValidationError
from app.modules.auth.models import User, UserCompany
from app.modules.auth.schemas import (
    TokenResponse, UserMe, UserCompanyOut, UserCreate, UserUpdate
)
from app.modules.auth.utils import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _to_me(self, user: User) -> UserMe:
        companies = [
            UserCompanyOut(
                company_id=uc.company_id,
                company_name=uc.company.name,
                is_active=uc.is_active
            )
            for uc in user.user_companies if uc.is_active
        ]
        me = UserMe.model_validate(user)
        me.companies = companies
        return me

    def login(self, email: str, password: str) -> TokenResponse:
        """
        Login de usuario con listado de empresas.
        """
        user = self.db.query(User).options(
            selectinload(User.user_companies).selectinload(UserCompany.company)
        ).filter(User.email == email.lower()).first()

        if not user or not verify_password(password, user.password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Credenciales incorrectas"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Cuenta inactiva"
            )

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)

        access_token = create_access_token({"sub": str(user.id), "email": user.email})
        logger.info(f"User {user.email} logged in")

        return TokenResponse(access_token=access_token, user=self._to_me(user))

    def get_me(self, user: User) -> UserMe:
        return self._to_me(user)


class UserService:
    """Gestión de usuarios de la empresa activa (solo ADMIN)."""

    def __init__(self, db: Session):
        self.db = db

    def list_users(self, tenant_id: UUID) -> List[User]:
        return self.db.query(User).join(UserCompany).filter(
            UserCompany.company_id == tenant_id
        ).order_by(User.created_at.desc()).all()

    def get_user(self, user_id: UUID, tenant_id: UUID) -> User:
        user = self.db.query(User).join(UserCompany).filter(
            User.id == user_id,
            UserCompany.company_id == tenant_id
        ).first()
        if not user:
            raise NotFoundError("Usuario no encontrado")
        return user

    def create_user(self, user_data: UserCreate, tenant_id: UUID) -> User:
        """Crear usuario y asociarlo a la empresa activa"""
        email = user_data.email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise ConflictError(f"Ya existe un usuario con el email {email}")

        try:
            user = User(
                email=email,
                name=user_data.name,
                password=hash_password(user_data.password),
                role=user_data.role.value,
                allowed_sections=user_data.allowed_sections,
            )
            self.db.add(user)
            self.db.flush()
            self.db.add(UserCompany(user_id=user.id, company_id=tenant_id))
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Ya existe un usuario con el email {email}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating user {email}: {e}", exc_info=True)
            raise TransactionFailure("Error creando usuario")

    def update_user(self, user_id: UUID, user_update: UserUpdate, tenant_id: UUID) -> User:
        user = self.get_user(user_id, tenant_id)
        data = user_update.model_dump(exclude_unset=True)

        if "password" in data:
            password = data.pop("password")
            if password:
                user.password = hash_password(password)
        if "role" in data and data["role"] is not None:
            user.role = data.pop("role").value
        for field, value in data.items():
            if value is not None:
                setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user_id: UUID, tenant_id: UUID, current_user_id: UUID) -> None:
        if user_id == current_user_id:
            raise ValidationError("No puedes eliminar tu propio usuario")
        user = self.get_user(user_id, tenant_id)
        self.db.delete(user)
        self.db.commit()
