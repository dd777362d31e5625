"""
Configuration partagée pour tous les tests.
Chaque test dispose de sa propre base SQLite (fichier temporaire) initialisée par init_db().
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from student_records.database import get_db, init_db, make_engine
from student_records.main import app
from student_records.services import auth_service

ADMIN_PASSWORD = "s3cret-admin"


@pytest.fixture
def engine(tmp_path):
    """Moteur sur une base neuve, déjà migrée, avec le compte admin par défaut."""
    eng = make_engine(f"sqlite:///{tmp_path / 'student.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine, session_factory):
    """Client HTTP de test branché sur la base temporaire."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with patch("student_records.main.init_db", lambda: init_db(engine)):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_auth(db):
    """Identifiants admin utilisables : le mot de passe par défaut a été changé."""
    auth_service.change_password(db, "admin", "admin", ADMIN_PASSWORD)
    return ("admin", ADMIN_PASSWORD)
