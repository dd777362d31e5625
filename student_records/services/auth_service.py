"""
Service d'authentification : hachage, vérification des identifiants,
changement et réinitialisation des mots de passe, création des comptes.

Les mots de passe sont hachés avec pbkdf2_sha256 (salé, itéré).
Les empreintes SHA-256 hexadécimales non salées des anciennes bases restent
vérifiables et sont remplacées à la première connexion réussie.
"""

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_records.config import settings
from student_records.exceptions import (
    AuthError,
    AuthorizationError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)
from student_records.models.user import User
from student_records.schemas.auth import AuthResult

logger = logging.getLogger(__name__)

ROLES = ("admin", "student")

pwd_context = CryptContext(schemes=["pbkdf2_sha256", "hex_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def new_user(
    username: str,
    password: str,
    role: str,
    student_id: Optional[str] = None,
    must_change_password: bool = False,
) -> User:
    """Construit un compte (non ajouté à la session)."""
    return User(**_user_values(username, password, role, student_id, must_change_password))


def create_user(
    db: Session,
    username: str,
    password: str,
    role: str,
    student_id: Optional[str] = None,
    must_change_password: bool = False,
) -> None:
    """
    Crée un compte. Aucune vérification préalable d'existence : l'appelant
    utilise user_exists(). Lève DuplicateKeyError si le nom d'utilisateur est pris.
    """
    values = _user_values(username, password, role, student_id, must_change_password)
    try:
        db.execute(insert(User).values(**values))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateKeyError(f"Le compte '{username}' existe déjà.")


def user_exists(db: Session, username: str) -> bool:
    return db.execute(
        select(User.username).where(User.username == username)
    ).scalar() is not None


def authenticate(db: Session, username: str, password: str) -> AuthResult:
    """
    Vérifie les identifiants.
    Un utilisateur inconnu et un mauvais mot de passe donnent le même résultat.
    """
    user = db.get(User, username) if username else None
    if user is None:
        pwd_context.dummy_verify()
        return AuthResult(ok=False)

    try:
        valid, upgraded_hash = pwd_context.verify_and_update(password, user.password_hash)
    except ValueError:
        logger.warning("Empreinte de mot de passe illisible pour le compte %s", username)
        return AuthResult(ok=False)

    if not valid:
        return AuthResult(ok=False)

    if upgraded_hash:
        user.password_hash = upgraded_hash
        db.commit()
        logger.info("Empreinte du mot de passe de %s mise à niveau", username)

    return AuthResult(
        ok=True,
        username=user.username,
        role=user.role,
        student_id=user.student_id,
        must_change_password=bool(user.must_change_password),
    )


def change_password(db: Session, username: str, old_password: str, new_password: str) -> None:
    """Change son propre mot de passe. Lève AuthError si l'ancien mot de passe est refusé."""
    if not authenticate(db, username, old_password).ok:
        raise AuthError("Nom d'utilisateur ou mot de passe actuel invalide.")
    _check_new_password(new_password)

    user = db.get(User, username)
    user.password_hash = hash_password(new_password)
    user.must_change_password = False
    db.commit()
    logger.info("Mot de passe changé pour %s", username)


def reset_password(
    db: Session,
    admin_username: str,
    admin_password: str,
    target_username: str,
    new_password: str,
) -> None:
    """
    Réinitialise le mot de passe d'un autre compte, sans connaître l'ancien.
    Exige des identifiants administrateur valides (AuthorizationError sinon).
    Lève NotFoundError si le compte ciblé n'existe pas.
    """
    admin = authenticate(db, admin_username, admin_password)
    if not admin.ok or admin.role != "admin":
        logger.warning("Réinitialisation refusée pour %s (demandée par %s)", target_username, admin_username)
        raise AuthorizationError("Identifiants administrateur invalides ou droits insuffisants.")

    target = db.get(User, target_username)
    if target is None:
        raise NotFoundError(f"Le compte '{target_username}' n'existe pas.")
    _check_new_password(new_password)

    target.password_hash = hash_password(new_password)
    target.must_change_password = True
    db.commit()
    logger.info("Mot de passe de %s réinitialisé par %s", target_username, admin_username)


def ensure_default_admin(db: Session) -> bool:
    """
    Crée le compte administrateur par défaut si aucun compte n'existe.
    Retourne True si le compte vient d'être créé.
    """
    count = db.execute(select(func.count()).select_from(User)).scalar() or 0
    if count:
        return False

    create_user(
        db,
        settings.DEFAULT_ADMIN_USERNAME,
        settings.DEFAULT_ADMIN_PASSWORD,
        "admin",
        must_change_password=True,
    )
    logger.warning(
        "Compte administrateur par défaut '%s' créé : mot de passe à changer à la première connexion.",
        settings.DEFAULT_ADMIN_USERNAME,
    )
    return True


def _user_values(
    username: str,
    password: str,
    role: str,
    student_id: Optional[str],
    must_change_password: bool,
) -> dict:
    if not username or not username.strip():
        raise ValidationError("Le nom d'utilisateur est obligatoire.")
    if role not in ROLES:
        raise ValidationError(f"Rôle inconnu : '{role}'.")
    return {
        "username": username.strip(),
        "password_hash": hash_password(password),
        "role": role,
        "student_id": student_id,
        "must_change_password": must_change_password,
    }


def _check_new_password(password: str) -> None:
    if not password:
        raise ValidationError("Le nouveau mot de passe ne peut pas être vide.")
