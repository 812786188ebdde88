from pydantic import AliasChoices, EmailStr, Field, computed_field, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel
from app.common.validators import validate_rut, format_rut


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class ClientBase(CamelModel):
    # El frontend usa los nombres en español (razonSocial, nombreComercial, telefono, notas)
    name: str = Field(..., min_length=1, max_length=200, validation_alias=AliasChoices("razonSocial", "name"))
    trade_name: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("nombreComercial", "tradeName", "trade_name")
    )
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("telefono", "phone"))
    address: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = Field(None, validation_alias=AliasChoices("notas", "notes"))

    @field_validator("trade_name", "email", "phone", "address", "notes", mode="before")
    @classmethod
    def empty_strings(cls, v):
        return _blank_to_none(v)


class ClientCreate(ClientBase):
    rut: str = Field(..., description="RUT con dígito verificador, ej: 76.123.456-7")

    @field_validator("rut")
    @classmethod
    def check_rut(cls, v):
        if not validate_rut(v):
            raise ValueError("RUT inválido")
        return format_rut(v)


class ClientUpdate(CamelModel):
    rut: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200, validation_alias=AliasChoices("razonSocial", "name"))
    trade_name: Optional[str] = Field(
        None, max_length=200, validation_alias=AliasChoices("nombreComercial", "tradeName", "trade_name")
    )
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("telefono", "phone"))
    address: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = Field(None, validation_alias=AliasChoices("notas", "notes"))

    @field_validator("trade_name", "email", "phone", "address", "notes", mode="before")
    @classmethod
    def empty_strings(cls, v):
        return _blank_to_none(v)

    @field_validator("rut")
    @classmethod
    def check_rut(cls, v):
        if v is None:
            return v
        if not validate_rut(v):
            raise ValueError("RUT inválido")
        return format_rut(v)


class ClientOut(CamelModel):
    id: UUID
    rut: str
    name: str
    trade_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @computed_field(alias="razonSocial")
    @property
    def razon_social(self) -> str:
        return self.name

    @computed_field(alias="nombreComercial")
    @property
    def nombre_comercial(self) -> str:
        return self.trade_name or self.name

    @computed_field(alias="telefono")
    @property
    def telefono(self) -> Optional[str]:
        return self.phone
