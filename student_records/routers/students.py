"""
Router pour les fiches élèves.
Listage et recherche (GET /api/v1/students?q=)
Consultation (GET /api/v1/students/{id})
Création (POST /api/v1/students)
Mise à jour complète (PUT /api/v1/students/{id})
Suppression (DELETE /api/v1/students/{id})
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from student_records.database import get_db
from student_records.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from student_records.schemas.auth import AuthResult
from student_records.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from student_records.services import student_service
from student_records.utils.auth import ensure_admin_or_owner, get_current_user, require_admin

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])


@router.get("", response_model=List[StudentResponse], summary="Lister ou rechercher les élèves")
def list_students(
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    _admin: AuthResult = Depends(require_admin),
):
    """
    Retourne toutes les fiches triées par nom (sans tenir compte de la casse).
    Avec `q`, ne garde que celles dont un champ de recherche contient `q`.
    """
    return student_service.search_students(db, q)


@router.get("/{student_id}", response_model=StudentResponse, summary="Consulter une fiche")
def get_student(
    student_id: str,
    db: Session = Depends(get_db),
    user: AuthResult = Depends(get_current_user),
):
    ensure_admin_or_owner(user, student_id)
    try:
        return student_service.get_student(db, student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("", response_model=StudentResponse, status_code=201, summary="Créer une fiche")
def create_student(
    data: StudentCreate,
    db: Session = Depends(get_db),
    _admin: AuthResult = Depends(require_admin),
):
    """Crée la fiche et le compte élève associé (identifiant et mot de passe = matricule)."""
    try:
        return student_service.create_student(db, data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateKeyError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{student_id}", response_model=StudentResponse, summary="Modifier une fiche")
def update_student(
    student_id: str,
    data: StudentUpdate,
    db: Session = Depends(get_db),
    _admin: AuthResult = Depends(require_admin),
):
    """Remplace tous les champs de la fiche ; l'âge est recalculé depuis la date de naissance."""
    try:
        return student_service.update_student(db, student_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{student_id}", status_code=204, summary="Supprimer une fiche")
def delete_student(
    student_id: str,
    db: Session = Depends(get_db),
    _admin: AuthResult = Depends(require_admin),
):
    try:
        student_service.delete_student(db, student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
