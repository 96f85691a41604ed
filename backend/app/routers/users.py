"""
Router pour l'administration des comptes et le profil de l'utilisateur connecté.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import Principal, require_roles
from app.database import get_db
from app.exceptions import ServiceError
from app.models.user import Role
from app.schemas.common import MessageResponse
from app.schemas.user import ProfileUpdate, RoleUpdate, UserSummary, UserWithEnrollments
from app.services import user_service

router = APIRouter(prefix="/api", tags=["Utilisateurs"])

admin_only = require_roles(Role.ADMIN)


@router.get("/admin/users", response_model=List[UserWithEnrollments], summary="Lister les utilisateurs")
def list_users(_: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    """Tous les comptes, du plus récent au plus ancien, avec leurs inscriptions."""
    return user_service.list_users(db)


@router.patch("/admin/users", response_model=UserSummary, summary="Modifier le rôle")
def change_role(data: RoleUpdate, _: Principal = Depends(admin_only), db: Session = Depends(get_db)):
    """
    Change le rôle d'un utilisateur.
    Un administrateur peut modifier son propre rôle (aucun blocage côté API).
    """
    try:
        return user_service.change_role(db, data.user_id, data.role)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/admin/users", response_model=MessageResponse, summary="Supprimer un utilisateur")
def delete_user(
    user_id: uuid.UUID = Query(alias="userId"),
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    """Supprime un compte et ses inscriptions/présences. Interdit sur son propre compte."""
    try:
        user_service.delete_user(db, user_id, acting_user_id=principal.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return MessageResponse(message="Utilisateur supprimé.")


@router.patch("/user/profile", response_model=UserSummary, summary="Modifier son profil")
def update_profile(
    data: ProfileUpdate,
    principal: Principal = Depends(require_roles()),
    db: Session = Depends(get_db),
):
    try:
        return user_service.update_profile(db, principal.id, data.name)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
