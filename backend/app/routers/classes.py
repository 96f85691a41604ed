"""
Router pour les classes et les inscriptions élève ↔ classe.
"""

import uuid
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import Principal, require_roles
from app.database import get_db
from app.exceptions import ServiceError
from app.models.user import Role
from app.schemas.common import MessageResponse
from app.schemas.school_class import (
    ClassCreate,
    ClassListItem,
    ClassResponse,
    ClassStudentsResponse,
    EnrollmentSync,
    StudentClassesResponse,
)
from app.services import class_service

router = APIRouter(prefix="/api/classes", tags=["Classes"])

staff_only = require_roles(Role.ADMIN, Role.TEACHER)


@router.get("", response_model=List[ClassListItem], summary="Lister les classes")
def list_classes(_: Principal = Depends(require_roles()), db: Session = Depends(get_db)):
    """Retourne toutes les classes avec leur nombre d'inscrits et leur enseignant."""
    return class_service.get_classes(db)


@router.post("", response_model=ClassResponse, status_code=201, summary="Créer une classe")
def create_class(data: ClassCreate, _: Principal = Depends(staff_only), db: Session = Depends(get_db)):
    """Crée une classe. Le code doit être unique."""
    try:
        return class_service.create_class(db, data)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("", response_model=MessageResponse, summary="Supprimer une classe")
def delete_class(
    class_id: uuid.UUID = Query(alias="classId"),
    _: Principal = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    """Supprime une classe ; inscriptions et présences sont supprimées en cascade."""
    if not class_service.delete_class(db, class_id):
        raise HTTPException(status_code=404, detail="Classe introuvable.")
    return MessageResponse(message="Classe supprimée.")


# --- Inscriptions ---

@router.get(
    "/students",
    response_model=Union[ClassStudentsResponse, StudentClassesResponse],
    summary="Inscriptions d'une classe ou d'un élève",
)
def list_enrollments(
    class_id: Optional[uuid.UUID] = Query(None, alias="classId"),
    student_id: Optional[uuid.UUID] = Query(None, alias="studentId"),
    _: Principal = Depends(require_roles()),
    db: Session = Depends(get_db),
):
    """`classId` → élèves inscrits (triés par nom) ; `studentId` → classes suivies."""
    if class_id is not None:
        return ClassStudentsResponse(students=class_service.get_class_students(db, class_id))
    if student_id is not None:
        return StudentClassesResponse(classes=class_service.get_student_classes(db, student_id))
    raise HTTPException(status_code=400, detail="classId ou studentId est obligatoire.")


@router.post("/students", response_model=MessageResponse, summary="Resynchroniser les inscriptions d'un élève")
def sync_enrollments(data: EnrollmentSync, _: Principal = Depends(staff_only), db: Session = Depends(get_db)):
    """Remplace toutes les inscriptions de l'élève par `classIds` (liste vide = désinscription totale)."""
    try:
        class_service.sync_student_classes(db, data.student_id, data.class_ids)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return MessageResponse(message="Inscriptions mises à jour.")


@router.delete("/students", response_model=MessageResponse, summary="Désinscrire un élève")
def remove_enrollment(
    student_id: uuid.UUID = Query(alias="studentId"),
    class_id: uuid.UUID = Query(alias="classId"),
    _: Principal = Depends(staff_only),
    db: Session = Depends(get_db),
):
    class_service.remove_enrollment(db, student_id, class_id)
    return MessageResponse(message="Inscription supprimée.")
