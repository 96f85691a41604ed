"""
Schémas Pydantic pour les utilisateurs, l'inscription et la connexion.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel


class UserRegister(CamelModel):
    """Corps de requête POST /auth/register. Les champs manquants sont vérifiés par le service."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class RegisterResponse(CamelModel):
    message: str
    user_id: uuid.UUID


class LoginRequest(CamelModel):
    """Même normalisation de l'email qu'à l'inscription (domaine en minuscules)."""
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class RoleUpdate(CamelModel):
    """Corps de requête PATCH /admin/users."""
    user_id: uuid.UUID
    role: str


class ProfileUpdate(CamelModel):
    """Corps de requête PATCH /user/profile."""
    name: Optional[str] = None


class UserSummary(CamelModel):
    id: uuid.UUID
    name: Optional[str]
    email: str
    role: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class EnrolledClass(CamelModel):
    id: uuid.UUID
    name: str
    code: str


class UserEnrollment(CamelModel):
    class_id: uuid.UUID
    school_class: EnrolledClass = Field(alias="class")


class UserWithEnrollments(UserSummary):
    """Ligne de la liste d'administration : utilisateur + classes suivies."""
    created_at: Optional[datetime]
    enrollments: List[UserEnrollment]
