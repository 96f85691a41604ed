"""
Initialisation de la base : création des tables et du premier administrateur.
L'inscription publique n'attribue jamais le rôle ADMIN, le premier compte
administrateur est donc créé ici.
"""

import logging
import uuid

from pydantic import EmailStr, TypeAdapter
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

import app.models  # noqa: F401, enregistre toutes les tables dans Base.metadata
from app.auth.security import hash_password, password_too_long
from app.database import Base
from app.exceptions import ValidationError
from app.models.user import Role, User

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


def create_tables(engine: Engine) -> list[str]:
    Base.metadata.create_all(bind=engine)
    return sorted(Base.metadata.tables)


def ensure_admin(db: Session, email: str, password: str, name: str = "Administrateur") -> uuid.UUID:
    """
    Crée le compte administrateur s'il n'existe pas.
    Un compte existant avec cet email est promu ADMIN, son mot de passe n'est pas modifié.
    """
    email = _email_adapter.validate_python(email)
    user = db.execute(select(User).where(User.email == email)).scalar()
    if user is None:
        if password_too_long(password):
            raise ValidationError("Le mot de passe ne peut pas dépasser 72 octets.")
        user = User(name=name, email=email, password_hash=hash_password(password), role=Role.ADMIN.value)
        db.add(user)
        logger.info("Administrateur créé : %s", email)
    elif user.role != Role.ADMIN.value:
        user.role = Role.ADMIN.value
        logger.info("Compte %s promu administrateur", email)
    db.commit()
    db.refresh(user)
    return user.id
