"""
Service métier pour les comptes utilisateurs : inscription, connexion,
administration des rôles et profil.
"""

import uuid
import logging
from collections import defaultdict
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.security import create_access_token, hash_password, password_too_long, verify_password
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.school_class import Enrollment, SchoolClass
from app.models.user import Role, User
from app.schemas.user import (
    EnrolledClass,
    LoginRequest,
    TokenResponse,
    UserEnrollment,
    UserRegister,
    UserSummary,
    UserWithEnrollments,
)

logger = logging.getLogger(__name__)

# Rôles qu'un visiteur peut choisir à l'inscription (ADMIN jamais auto-attribué)
SELF_ASSIGNABLE_ROLES = {Role.STUDENT.value, Role.TEACHER.value}


class InvalidCredentialsError(Exception):
    """Email inconnu ou mot de passe incorrect."""


def register_user(db: Session, data: UserRegister) -> uuid.UUID:
    """
    Crée un compte et retourne son ID.

    - name, email et password sont obligatoires
    - le rôle vaut STUDENT sauf si TEACHER est demandé explicitement
    - le mot de passe est haché (bcrypt) avant stockage
    Lève ValidationError si un champ manque ou si le mot de passe est trop long, ConflictError si l'email existe déjà.
    """
    if not data.name or not data.email or not data.password:
        raise ValidationError("Le nom, l'email et le mot de passe sont obligatoires.")
    if password_too_long(data.password):
        raise ValidationError("Le mot de passe ne peut pas dépasser 72 octets.")

    existing = db.execute(select(User.id).where(User.email == data.email)).scalar()
    if existing is not None:
        raise ConflictError("Un compte existe déjà avec cet email.")

    role = data.role if data.role in SELF_ASSIGNABLE_ROLES else Role.STUDENT.value
    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Inscription concurrente avec le même email
        db.rollback()
        raise ConflictError("Un compte existe déjà avec cet email.")
    db.refresh(user)

    logger.info("Compte créé : %s (%s)", user.id, role)
    return user.id


def authenticate(db: Session, data: LoginRequest) -> TokenResponse:
    """Vérifie les identifiants et émet un jeton d'accès."""
    if not data.email or not data.password:
        raise ValidationError("L'email et le mot de passe sont obligatoires.")

    user = db.execute(select(User).where(User.email == data.email)).scalar()
    if user is None or not verify_password(data.password, user.password_hash):
        raise InvalidCredentialsError("Email ou mot de passe invalide.")

    token = create_access_token(user.id, user.role)
    return TokenResponse(access_token=token, user=UserSummary.model_validate(user))


def get_user(db: Session, user_id: uuid.UUID) -> Optional[UserSummary]:
    user = db.get(User, user_id)
    if user is None:
        return None
    return UserSummary.model_validate(user)


def list_users(db: Session) -> list[UserWithEnrollments]:
    """Retourne tous les utilisateurs, du plus récent au plus ancien, avec leurs classes."""
    users = db.execute(
        select(User).order_by(User.created_at.desc())
    ).scalars().all()

    rows = db.execute(
        select(Enrollment.student_id, SchoolClass)
        .join(SchoolClass, SchoolClass.id == Enrollment.class_id)
        .order_by(SchoolClass.name)
    ).all()

    by_student = defaultdict(list)
    for student_id, school_class in rows:
        by_student[student_id].append(
            UserEnrollment(
                class_id=school_class.id,
                school_class=EnrolledClass.model_validate(school_class),
            )
        )

    return [
        UserWithEnrollments(
            id=u.id,
            name=u.name,
            email=u.email,
            role=u.role,
            created_at=u.created_at,
            enrollments=by_student.get(u.id, []),
        )
        for u in users
    ]


def change_role(db: Session, user_id: uuid.UUID, role: str) -> UserSummary:
    """
    Modifie le rôle d'un utilisateur.
    Lève ValidationError si le rôle est inconnu, NotFoundError si l'utilisateur n'existe pas.
    """
    if role not in {r.value for r in Role}:
        raise ValidationError("Rôle invalide.")

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("Utilisateur introuvable.")

    user.role = role
    db.commit()
    db.refresh(user)

    logger.info("Rôle de %s modifié : %s", user.id, role)
    return UserSummary.model_validate(user)


def delete_user(db: Session, user_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
    """
    Supprime un compte. Inscriptions et présences suivent en cascade (FK ON DELETE CASCADE),
    les classes dont il était l'enseignant perdent leur responsable.
    """
    if user_id == acting_user_id:
        raise ValidationError("Vous ne pouvez pas supprimer votre propre compte.")

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("Utilisateur introuvable.")

    db.delete(user)
    db.commit()
    logger.info("Compte supprimé : %s (par %s)", user_id, acting_user_id)


def update_profile(db: Session, user_id: uuid.UUID, name: Optional[str]) -> UserSummary:
    """Met à jour le nom affiché de l'utilisateur connecté."""
    if not name or not name.strip():
        raise ValidationError("Le nom est obligatoire.")

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("Utilisateur introuvable.")

    user.name = name.strip()
    db.commit()
    db.refresh(user)
    return UserSummary.model_validate(user)
