from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from app.database.database import get_db
from app.common.schemas import SuccessResponse
from app.modules.auth.service import AuthService, UserService
from app.modules.auth.dependencies import get_current_user, require_admin
from app.modules.auth.models import User
from app.modules.auth.schemas import (
    UserLogin, TokenResponse, UserMe, UserOut, UserCreate, UserUpdate, AuthContext
)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])
users_router = APIRouter(prefix="/users", tags=["Users"])


@auth_router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """
    Login con email y contraseña. Retorna el token de acceso y las empresas del usuario.
    """
    return AuthService(db).login(credentials.email, credentials.password)


@auth_router.get("/me", response_model=UserMe)
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return AuthService(db).get_me(user)


# --- USUARIOS (Admin) ---

@users_router.get("/", response_model=List[UserOut])
def list_users(
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_admin())
):
    return UserService(db).list_users(auth_context.tenant_id)


@users_router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_admin())
):
    """Crear un usuario y asociarlo a la empresa activa"""
    return UserService(db).create_user(user_data, auth_context.tenant_id)


@users_router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: UUID,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_admin())
):
    return UserService(db).update_user(user_id, user_update, auth_context.tenant_id)


@users_router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_admin())
):
    UserService(db).delete_user(user_id, auth_context.tenant_id, auth_context.user_id)
    return SuccessResponse()
