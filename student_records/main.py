"""
Point d'entrée de l'API locale Student Records.
Démarrage : uvicorn student_records.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import student_records.models  # noqa: F401  enregistre tous les modèles dans Base.metadata avant les routers
from student_records.database import init_db
from student_records.logging_config import setup_logging
from student_records.routers import auth, edit_requests, students

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie : journalisation, puis création/migration de la base."""
    setup_logging()
    result = init_db()
    if result.default_admin_created:
        logger.warning("Premier démarrage : connectez-vous avec le compte administrateur par défaut et changez son mot de passe.")
    yield


app = FastAPI(
    title="Student Records API",
    description="Gestion locale des fiches élèves et des demandes de modification",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : seule l'interface locale (localhost) appelle l'API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(students.router)
app.include_router(edit_requests.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Student Records API", "version": "0.1.0"}
