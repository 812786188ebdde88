"""
Dependencias de autenticación para FastAPI.
"""
from uuid import UUID
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt

from app.database.database import get_db
from app.modules.auth.models import User, UserCompany, UserRole
from app.modules.auth.schemas import AuthContext
from app.modules.auth.utils import decode_access_token, has_permission

# Security scheme
security = HTTPBearer()


class AuthDependencies:
    """Dependencias de autenticación reutilizables."""

    @staticmethod
    def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: Session = Depends(get_db)
    ) -> User:
        """
        Obtener usuario actual desde token JWT.
        No requiere tenant (para endpoints generales).
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No se pudieron validar las credenciales",
            headers={"WWW-Authenticate": "Bearer"},
        )

        try:
            payload = decode_access_token(credentials.credentials)
            user_id = UUID(payload.get("sub") or "")
        except (jwt.PyJWTError, ValueError):
            raise credentials_exception

        user = db.query(User).filter(User.id == user_id).first()
        if user is None or not user.is_active:
            raise credentials_exception

        return user

    @staticmethod
    def get_auth_context(
        request: Request,
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: Session = Depends(get_db)
    ) -> AuthContext:
        """
        Contexto de autenticación con tenant.
        El tenant viene del header X-Company-ID (validado por TenantMiddleware)
        y el usuario debe ser miembro activo de esa empresa.
        """
        user = AuthDependencies.get_current_user(credentials, db)

        tenant_id = getattr(request.state, "tenant_id", None)
        if tenant_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Se requiere seleccionar una empresa (X-Company-ID)"
            )

        membership = db.query(UserCompany).filter(
            UserCompany.user_id == user.id,
            UserCompany.company_id == tenant_id,
            UserCompany.is_active.is_(True)
        ).first()
        if not membership:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tienes acceso a esta empresa"
            )

        return AuthContext(
            user_id=user.id,
            tenant_id=tenant_id,
            role=UserRole(user.role),
            allowed_sections=list(user.allowed_sections or []),
        )

    @staticmethod
    def require_permission(resource: str, action: str):
        """
        Dependencia para requerir un permiso `resource:action`.
        """
        def permission_checker(auth_context: AuthContext = Depends(AuthDependencies.get_auth_context)):
            if not has_permission(auth_context.role.value, auth_context.allowed_sections, resource, action):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"No tienes permiso para {action} en {resource}"
                )
            return auth_context
        return permission_checker

    @staticmethod
    def require_admin():
        """Dependencia para requerir rol ADMIN dentro de la empresa activa."""
        def admin_checker(auth_context: AuthContext = Depends(AuthDependencies.get_auth_context)):
            if auth_context.role != UserRole.ADMIN:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Se requiere rol de administrador"
                )
            return auth_context
        return admin_checker


# Instancias de dependencias
get_current_user = AuthDependencies.get_current_user
get_auth_context = AuthDependencies.get_auth_context
require_permission = AuthDependencies.require_permission
require_admin = AuthDependencies.require_admin
