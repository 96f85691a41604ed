"""
Router pour l'inscription et la connexion.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth.dependencies import Principal, require_roles
from app.database import get_db
from app.exceptions import ServiceError
from app.schemas.user import LoginRequest, RegisterResponse, TokenResponse, UserRegister, UserSummary
from app.services import user_service

router = APIRouter(prefix="/api/auth", tags=["Authentification"])


@router.post("/register", response_model=RegisterResponse, status_code=201, summary="Créer un compte")
def register(data: UserRegister, db: Session = Depends(get_db)):
    """Crée un compte STUDENT (ou TEACHER si demandé). ADMIN n'est jamais attribuable ici."""
    try:
        user_id = user_service.register_user(db, data)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return RegisterResponse(message="Compte créé avec succès.", user_id=user_id)


@router.post("/login", response_model=TokenResponse, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Vérifie email + mot de passe et retourne un jeton Bearer."""
    try:
        return user_service.authenticate(db, data)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except user_service.InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"})


@router.get("/me", response_model=UserSummary, summary="Utilisateur connecté")
def me(principal: Principal = Depends(require_roles()), db: Session = Depends(get_db)):
    user = user_service.get_user(db, principal.id)
    if user is None:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable.")
    return user
