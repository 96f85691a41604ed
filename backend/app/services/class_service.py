"""
Service métier pour les classes et les inscriptions élève ↔ classe.
"""

import uuid
import logging
from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.school_class import Enrollment, SchoolClass
from app.models.user import User
from app.schemas.school_class import (
    ClassCreate,
    ClassListItem,
    ClassResponse,
    ClassSummary,
    StudentSummary,
    TeacherSummary,
)

logger = logging.getLogger(__name__)


def get_classes(db: Session) -> list[ClassListItem]:
    """Retourne toutes les classes triées par nom, avec nombre d'inscrits et enseignant."""
    counts = (
        select(Enrollment.class_id, func.count().label("nb"))
        .group_by(Enrollment.class_id)
        .subquery()
    )
    rows = db.execute(
        select(SchoolClass, User, func.coalesce(counts.c.nb, 0))
        .outerjoin(User, User.id == SchoolClass.teacher_id)
        .outerjoin(counts, counts.c.class_id == SchoolClass.id)
        .order_by(SchoolClass.name)
    ).all()

    return [
        ClassListItem(
            id=school_class.id,
            name=school_class.name,
            code=school_class.code,
            teacher_id=school_class.teacher_id,
            created_at=school_class.created_at,
            enrollment_count=nb or 0,
            teacher=TeacherSummary.model_validate(teacher) if teacher is not None else None,
        )
        for school_class, teacher, nb in rows
    ]


def create_class(db: Session, data: ClassCreate) -> ClassResponse:
    """
    Crée une classe.
    Lève ValidationError si le nom ou le code est vide, NotFoundError si l'enseignant
    n'existe pas, ConflictError si le code est déjà utilisé.
    """
    if not data.name or not data.code:
        raise ValidationError("Le nom et le code de la classe sont obligatoires.")

    if data.teacher_id is not None and db.get(User, data.teacher_id) is None:
        raise NotFoundError("Enseignant introuvable.")

    school_class = SchoolClass(name=data.name, code=data.code, teacher_id=data.teacher_id)
    db.add(school_class)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Le code de classe '{data.code}' existe déjà.")
    db.refresh(school_class)

    logger.info("Classe créée : %s (%s)", school_class.code, school_class.id)
    return ClassResponse.model_validate(school_class)


def delete_class(db: Session, class_id: uuid.UUID) -> bool:
    """
    Supprime une classe. Inscriptions et présences sont supprimées en cascade.
    Retourne True si supprimée, False si introuvable.
    """
    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        return False

    db.delete(school_class)
    db.commit()
    logger.info("Classe supprimée : %s", class_id)
    return True


# --- Inscriptions ---

def get_class_students(db: Session, class_id: uuid.UUID) -> list[StudentSummary]:
    """Élèves inscrits dans une classe, triés par nom."""
    students = db.execute(
        select(User)
        .join(Enrollment, Enrollment.student_id == User.id)
        .where(Enrollment.class_id == class_id)
        .order_by(User.name)
    ).scalars().all()
    return [StudentSummary.model_validate(s) for s in students]


def get_student_classes(db: Session, student_id: uuid.UUID) -> list[ClassSummary]:
    """Classes suivies par un élève."""
    classes = db.execute(
        select(SchoolClass)
        .join(Enrollment, Enrollment.class_id == SchoolClass.id)
        .where(Enrollment.student_id == student_id)
        .order_by(SchoolClass.name)
    ).scalars().all()
    return [ClassSummary.model_validate(c) for c in classes]


def sync_student_classes(db: Session, student_id: uuid.UUID, class_ids: List[uuid.UUID]) -> int:
    """
    Remplace l'ensemble des inscriptions d'un élève par `class_ids`.

    Étapes, dans une seule transaction :
    1. Vérifier que l'élève et toutes les classes existent
    2. Supprimer toutes les inscriptions existantes de l'élève
    3. Insérer une ligne par classe (doublons de la liste ignorés)

    Une liste vide désinscrit l'élève de tout. Retourne le nombre d'inscriptions.
    """
    if db.get(User, student_id) is None:
        raise NotFoundError("Élève introuvable.")

    # dict.fromkeys : dédoublonne en conservant l'ordre
    wanted = list(dict.fromkeys(class_ids))

    if wanted:
        found = set(db.execute(
            select(SchoolClass.id).where(SchoolClass.id.in_(wanted))
        ).scalars().all())
        if len(found) != len(wanted):
            raise NotFoundError("Une ou plusieurs classes sont introuvables.")

    try:
        db.execute(delete(Enrollment).where(Enrollment.student_id == student_id))
        if wanted:
            db.execute(
                Enrollment.__table__.insert(),
                [{"student_id": student_id, "class_id": cid} for cid in wanted],
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Inscriptions de %s resynchronisées : %d classe(s)", student_id, len(wanted))
    return len(wanted)


def remove_enrollment(db: Session, student_id: uuid.UUID, class_id: uuid.UUID) -> None:
    """Désinscrit un élève d'une classe. Sans effet si le lien n'existe pas."""
    db.execute(
        delete(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.class_id == class_id,
        )
    )
    db.commit()
