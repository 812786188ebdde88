from pydantic import EmailStr, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from app.common.schemas import CamelModel
from app.common.validators import validate_rut, format_rut


# Workers
class WorkerCreate(CamelModel):
    rut: str
    name: str = Field(..., min_length=1, max_length=200)
    role: Optional[str] = Field(None, max_length=100)
    specialty: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    experience_years: Optional[int] = Field(None, ge=0, le=80)
    certifications: List[str] = Field(default_factory=list)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def empty_strings(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("rut")
    @classmethod
    def check_rut(cls, v):
        if not validate_rut(v):
            raise ValueError("RUT inválido")
        return format_rut(v)


class WorkerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[str] = Field(None, max_length=100)
    specialty: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    experience_years: Optional[int] = Field(None, ge=0, le=80)
    certifications: Optional[List[str]] = None


class WorkerOut(CamelModel):
    id: UUID
    rut: str
    name: str
    role: Optional[str] = None
    specialty: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    experience_years: Optional[int] = None
    certifications: List[str] = []
    created_at: Optional[datetime] = None


# Crews
class CrewCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    role: Optional[str] = Field(None, max_length=100)
    project_id: Optional[UUID] = None
    worker_ids: List[UUID] = Field(default_factory=list)


class CrewUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[str] = Field(None, max_length=100)
    project_id: Optional[UUID] = None
    worker_ids: Optional[List[UUID]] = None


class CrewOut(CamelModel):
    id: UUID
    name: str
    role: Optional[str] = None
    project_id: Optional[UUID] = None
    worker_ids: List[UUID] = []
    workers: List[WorkerOut] = []


# Job titles
class JobTitleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class JobTitleOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
