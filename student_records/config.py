"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Base de données (fichier SQLite local par défaut)
    DATABASE_URL: str = "sqlite:///student.db"

    # Compte administrateur créé au premier démarrage si aucun compte n'existe.
    # Identifiants publics : changement de mot de passe imposé à la première connexion.
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin"

    # Journalisation
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
