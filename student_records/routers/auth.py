"""
Router d'authentification : connexion, changement et réinitialisation de mot de passe.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from student_records.database import get_db
from student_records.exceptions import AuthError, AuthorizationError, NotFoundError, ValidationError
from student_records.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
)
from student_records.services import auth_service
from student_records.utils.auth import get_current_user

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/login", response_model=AuthResult, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Vérifie les identifiants et retourne le rôle du compte.
    Si `role` est fourni, il doit correspondre au rôle enregistré.
    `must_change_password` signale un mot de passe par défaut ou réinitialisé.
    """
    result = auth_service.authenticate(db, data.username, data.password)
    if not result.ok:
        raise HTTPException(status_code=401, detail="Nom d'utilisateur ou mot de passe invalide.")
    if data.role is not None and data.role != result.role:
        raise HTTPException(
            status_code=403,
            detail=f"Ce compte est enregistré comme '{result.role}'. Sélectionnez le bon rôle.",
        )
    return result


@router.get("/me", response_model=AuthResult, summary="Compte connecté")
def me(user: AuthResult = Depends(get_current_user)):
    return user


@router.post("/change-password", summary="Changer son mot de passe")
def change_password(data: ChangePasswordRequest, db: Session = Depends(get_db)):
    try:
        auth_service.change_password(db, data.username, data.old_password, data.new_password)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"detail": "Mot de passe changé."}


@router.post("/reset-password", summary="Réinitialiser le mot de passe d'un compte")
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    """
    Un administrateur fixe un nouveau mot de passe pour un autre compte,
    en confirmant ses propres identifiants. Le compte ciblé devra le changer.
    """
    try:
        auth_service.reset_password(
            db,
            data.admin_username,
            data.admin_password,
            data.target_username,
            data.new_password,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"detail": f"Mot de passe du compte '{data.target_username}' réinitialisé."}
