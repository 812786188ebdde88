from app.database.database import Base
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from app.common.mixins import TimestampMixin
import uuid

class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False, index=True)
    rut = Column(String(20), unique=True, nullable=False)
    address = Column(String, nullable=True)
    phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    user_companies = relationship("UserCompany", back_populates="company", cascade="all, delete-orphan")
