from pydantic import Field, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel
from app.common.validators import validate_rut, format_rut, validate_chile_phone


class CompanyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    rut: str = Field(..., description="RUT de la empresa, ej: 76.123.456-7")
    address: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("rut")
    @classmethod
    def check_rut(cls, v):
        if not validate_rut(v):
            raise ValueError("RUT inválido")
        return format_rut(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v and not validate_chile_phone(v):
            raise ValueError("Teléfono inválido")
        return v


class CompanyOut(CamelModel):
    id: UUID
    name: str
    rut: str
    address: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
