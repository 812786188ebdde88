from pydantic import EmailStr, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel
from app.modules.auth.models import UserRole


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserCompanyOut(CamelModel):
    company_id: UUID
    company_name: str
    is_active: bool


class UserOut(CamelModel):
    id: UUID
    email: str
    name: str
    role: UserRole
    allowed_sections: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None


class UserMe(UserOut):
    companies: List[UserCompanyOut] = []


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserMe


class UserCreate(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.USER
    allowed_sections: List[str] = Field(default_factory=list)

    @field_validator("allowed_sections")
    @classmethod
    def validate_sections(cls, v):
        return [s.strip() for s in v if s and s.strip()]


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[UserRole] = None
    allowed_sections: Optional[List[str]] = None
    is_active: Optional[bool] = None


class AuthContext(CamelModel):
    """Contexto explícito por request: usuario autenticado y empresa activa."""
    user_id: UUID
    tenant_id: UUID
    role: UserRole
    allowed_sections: List[str] = []
