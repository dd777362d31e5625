"""
Configuration de la connexion à la base de données (SQLite local par défaut).
Fournit aussi init_db() : création des tables, migration additive des colonnes
et création du compte administrateur au premier démarrage.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from student_records.config import settings
from student_records.exceptions import StorageInitError

logger = logging.getLogger(__name__)

Base = declarative_base()

# Colonnes apparues après la première version du schéma.
# Ajoutées par ALTER TABLE si absentes, jamais modifiées ni supprimées.
COLUMN_MIGRATIONS = {
    "students": [
        ("age", "INTEGER"),
        ("course", "TEXT"),
        ("semester", "TEXT"),
    ],
    "users": [
        ("must_change_password", "BOOLEAN NOT NULL DEFAULT 0"),
    ],
}


class InitResult(BaseModel):
    """Résultat de init_db(), exploité par la couche de présentation."""
    default_admin_created: bool = False
    added_columns: List[str] = []


def make_engine(url: str) -> Engine:
    """Crée un moteur SQLAlchemy ; SQLite est partagé entre les threads du serveur."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Optional[Engine] = None) -> InitResult:
    """
    Prépare la base pour l'application. Idempotent.

    Étapes :
    1. Créer les tables manquantes
    2. Ajouter les colonnes manquantes des anciens schémas (COLUMN_MIGRATIONS)
    3. Créer le compte administrateur par défaut si aucun compte n'existe

    Lève StorageInitError si la base est inaccessible ou si une instruction échoue.
    """
    # Imports locaux pour éviter les imports circulaires (les modèles importent Base)
    import student_records.models  # noqa: F401
    from student_records.services import auth_service

    bind = bind if bind is not None else engine
    try:
        Base.metadata.create_all(bind)
        with bind.begin() as conn:
            added = _add_missing_columns(conn)

        db = Session(bind=bind, autoflush=False)
        try:
            admin_created = auth_service.ensure_default_admin(db)
        finally:
            db.close()
    except SQLAlchemyError as e:
        raise StorageInitError(f"Initialisation de la base impossible : {e}") from e

    return InitResult(default_admin_created=admin_created, added_columns=added)


def _add_missing_columns(conn: Connection) -> List[str]:
    """Compare PRAGMA table_info au schéma courant et ajoute les colonnes absentes."""
    added = []
    inspector = inspect(conn)
    for table, columns in COLUMN_MIGRATIONS.items():
        existing = {c["name"].lower() for c in inspector.get_columns(table)}
        for column, ddl in columns:
            if column.lower() in existing:
                continue
            # Noms issus de COLUMN_MIGRATIONS uniquement, jamais d'une entrée utilisateur
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
            added.append(f"{table}.{column}")
            logger.info("Migration : colonne %s.%s ajoutée", table, column)
    return added
