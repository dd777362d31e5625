"""
Dépendances FastAPI d'authentification (HTTP Basic, identifiants vérifiés à chaque appel).
"""

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from student_records.database import get_db
from student_records.schemas.auth import AuthResult
from student_records.services import auth_service

security = HTTPBasic()


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> AuthResult:
    result = auth_service.authenticate(db, credentials.username, credentials.password)
    if not result.ok:
        raise HTTPException(
            status_code=401,
            detail="Nom d'utilisateur ou mot de passe invalide.",
            headers={"WWW-Authenticate": "Basic"},
        )
    return result


def require_admin(user: AuthResult = Depends(get_current_user)) -> AuthResult:
    """Réservé aux administrateurs dont le mot de passe n'est plus provisoire."""
    _check_admin(user)
    return user


def ensure_admin_or_owner(user: AuthResult, student_id: str) -> None:
    """Un élève n'accède qu'à sa propre fiche ; un administrateur à toutes."""
    if user.role == "admin":
        _check_admin(user)
        return
    if user.student_id != student_id:
        raise HTTPException(status_code=403, detail="Accès limité à votre propre fiche.")


def _check_admin(user: AuthResult) -> None:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Action réservée aux administrateurs.")
    if user.must_change_password:
        raise HTTPException(
            status_code=403,
            detail="Mot de passe provisoire : changez-le avant toute action d'administration.",
        )
