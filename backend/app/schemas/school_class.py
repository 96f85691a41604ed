"""
Schémas Pydantic pour les classes et les inscriptions.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from app.schemas.common import CamelModel


class ClassCreate(CamelModel):
    name: Optional[str] = None
    code: Optional[str] = None
    teacher_id: Optional[uuid.UUID] = None

    @field_validator("name", "code")
    @classmethod
    def strip(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TeacherSummary(CamelModel):
    id: uuid.UUID
    name: Optional[str]
    email: str


class ClassResponse(CamelModel):
    id: uuid.UUID
    name: str
    code: str
    teacher_id: Optional[uuid.UUID]
    created_at: Optional[datetime]


class ClassListItem(ClassResponse):
    """Classe annotée du nombre d'inscrits et de son enseignant."""
    enrollment_count: int
    teacher: Optional[TeacherSummary]


class ClassSummary(CamelModel):
    id: uuid.UUID
    name: str
    code: str


class StudentSummary(CamelModel):
    id: uuid.UUID
    name: Optional[str]
    email: str


class EnrollmentSync(CamelModel):
    """Corps de requête POST /classes/students : remplace toutes les inscriptions de l'élève."""
    student_id: uuid.UUID
    class_ids: List[uuid.UUID]


class ClassStudentsResponse(CamelModel):
    students: List[StudentSummary]


class StudentClassesResponse(CamelModel):
    classes: List[ClassSummary]
