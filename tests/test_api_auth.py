"""
Tests d'intégration API pour l'authentification.
"""

from student_records.services import auth_service


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"


def test_login_admin_par_defaut_signale_le_changement(client):
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "admin"})
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["role"] == "admin"
    assert data["must_change_password"] is True


def test_login_echec_message_unique(client):
    unknown = client.post("/api/v1/auth/login", json={"username": "personne", "password": "x"})
    wrong = client.post("/api/v1/auth/login", json={"username": "admin", "password": "x"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


def test_login_role_attendu_different(client):
    response = client.post(
        "/api/v1/auth/login",
        json={"username": "admin", "password": "admin", "role": "student"},
    )
    assert response.status_code == 403
    assert "admin" in response.json()["detail"]


def test_change_password_puis_acces_admin(client):
    response = client.post("/api/v1/auth/change-password", json={
        "username": "admin", "old_password": "admin", "new_password": "solide",
    })
    assert response.status_code == 200
    assert client.get("/api/v1/students", auth=("admin", "solide")).status_code == 200


def test_change_password_nom_avec_espaces(client):
    assert client.post("/api/v1/auth/login", json={
        "username": " admin ", "password": "admin",
    }).status_code == 200

    response = client.post("/api/v1/auth/change-password", json={
        "username": " admin ", "old_password": "admin", "new_password": "solide",
    })
    assert response.status_code == 200
    assert client.get("/api/v1/students", auth=("admin", "solide")).status_code == 200


def test_change_password_ancien_faux_401(client):
    response = client.post("/api/v1/auth/change-password", json={
        "username": "admin", "old_password": "faux", "new_password": "solide",
    })
    assert response.status_code == 401


def test_reset_password_mauvais_admin_403(client, db):
    auth_service.create_user(db, "student1", "pw", "student", student_id="student1")
    response = client.post("/api/v1/auth/reset-password", json={
        "admin_username": "admin",
        "admin_password": "wrongpass",
        "target_username": "student1",
        "new_password": "newpw",
    })
    assert response.status_code == 403
    assert auth_service.authenticate(db, "student1", "pw").ok


def test_reset_password_compte_inexistant_404(client):
    response = client.post("/api/v1/auth/reset-password", json={
        "admin_username": "admin",
        "admin_password": "admin",
        "target_username": "fantome",
        "new_password": "newpw",
    })
    assert response.status_code == 404


def test_me(client, admin_auth):
    response = client.get("/api/v1/auth/me", auth=admin_auth)
    assert response.json()["username"] == "admin"
    assert response.json()["must_change_password"] is False
