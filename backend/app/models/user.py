"""
Modèle SQLAlchemy pour les utilisateurs (administrateurs, enseignants, élèves).
"""

import enum
import uuid

from sqlalchemy import Column, DateTime, String, Uuid, func

from app.database import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=Role.STUDENT.value)  # ADMIN, TEACHER, STUDENT
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
