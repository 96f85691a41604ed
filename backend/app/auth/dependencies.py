"""
Identité de la requête et contrôle d'accès par rôle.

get_current_principal lit le jeton Bearer (optionnel) et recharge l'utilisateur
en base : un compte supprimé ou un rôle modifié prend effet immédiatement.
require_roles construit la dépendance de garde utilisée par chaque route.
"""

import logging
import uuid
from typing import Iterable, Optional, Union

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.auth import security
from app.database import get_db
from app.models.user import Role, User

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    """Utilisateur authentifié à l'origine de la requête."""
    id: uuid.UUID
    role: Role

    model_config = {"frozen": True}


class Authorized(BaseModel):
    principal: Principal


class Denied(BaseModel):
    reason: str
    status_code: int


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """Retourne le Principal de la requête, ou None si aucun jeton valide."""
    if credentials is None:
        return None
    try:
        payload = security.decode_access_token(credentials.credentials)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as exc:
        logger.debug("Jeton rejeté : %s", exc)
        return None

    user = db.get(User, user_id)
    if user is None:
        return None
    return Principal(id=user.id, role=Role(user.role))


def check_access(principal: Optional[Principal], roles: Iterable[Role]) -> Union[Authorized, Denied]:
    """Garde pure : aucun rôle exigé = tout utilisateur authentifié."""
    if principal is None:
        return Denied(reason="Non authentifié.", status_code=status.HTTP_401_UNAUTHORIZED)
    allowed = set(roles)
    if allowed and principal.role not in allowed:
        return Denied(reason="Accès refusé.", status_code=status.HTTP_403_FORBIDDEN)
    return Authorized(principal=principal)


def require_roles(*roles: Role):
    """Fabrique la dépendance FastAPI qui lève 401/403 selon check_access."""

    def guard(principal: Optional[Principal] = Depends(get_current_principal)) -> Principal:
        decision = check_access(principal, roles)
        if isinstance(decision, Denied):
            headers = {"WWW-Authenticate": "Bearer"} if decision.status_code == status.HTTP_401_UNAUTHORIZED else None
            raise HTTPException(status_code=decision.status_code, detail=decision.reason, headers=headers)
        return decision.principal

    return guard
