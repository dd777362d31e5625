"""
Schémas Pydantic pour l'authentification et la gestion des mots de passe.
"""

from typing import Literal, Optional

from pydantic import BaseModel, field_validator

Role = Literal["admin", "student"]


class LoginRequest(BaseModel):
    """Corps de POST /auth/login. `role` : rôle attendu, vérifié s'il est fourni."""
    username: str
    password: str
    role: Optional[Role] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()


class AuthResult(BaseModel):
    """
    Résultat d'une authentification.
    En cas d'échec, aucune information de rôle ni de lien élève n'est renvoyée.
    """
    ok: bool
    username: Optional[str] = None
    role: Optional[Role] = None
    student_id: Optional[str] = None
    must_change_password: bool = False


class ChangePasswordRequest(BaseModel):
    username: str
    old_password: str
    new_password: str

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()

    @field_validator("new_password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Le nouveau mot de passe ne peut pas être vide.")
        return v


class ResetPasswordRequest(BaseModel):
    """Réinitialisation du mot de passe d'un autre compte par un administrateur."""
    admin_username: str
    admin_password: str
    target_username: str
    new_password: str

    @field_validator("admin_username", "target_username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()

    @field_validator("new_password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Le nouveau mot de passe ne peut pas être vide.")
        return v
