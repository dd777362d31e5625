"""
Router pour les demandes de modification de fiche.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from student_records.database import get_db
from student_records.exceptions import ConflictError, NotFoundError, ValidationError
from student_records.schemas.auth import AuthResult
from student_records.schemas.edit_request import (
    EditRequestCreate,
    EditRequestReject,
    EditRequestResponse,
)
from student_records.services import edit_request_service
from student_records.utils.auth import ensure_admin_or_owner, get_current_user, require_admin

router = APIRouter(prefix="/api/v1/edit-requests", tags=["Demandes de modification"])


@router.post("", response_model=EditRequestResponse, status_code=201, summary="Demander une modification")
def create_edit_request(
    data: EditRequestCreate,
    db: Session = Depends(get_db),
    user: AuthResult = Depends(get_current_user),
):
    """
    Soumet une demande de modification d'un champ de fiche.
    Champs acceptés : name, father_name (ou father), gender, dob, age, email,
    phone, address, course, semester (casse indifférente).
    """
    ensure_admin_or_owner(user, data.student_id.strip())
    try:
        return edit_request_service.create_edit_request(
            db, data.student_id, data.field, data.new_value, data.message
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=List[EditRequestResponse], summary="Lister les demandes")
def list_edit_requests(
    student_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: AuthResult = Depends(get_current_user),
):
    """
    Administrateur : toutes les demandes (ou celles d'un élève avec `student_id`).
    Élève : uniquement ses propres demandes.
    """
    if user.role != "admin":
        if student_id is not None and student_id != user.student_id:
            raise HTTPException(status_code=403, detail="Accès limité à vos propres demandes.")
        student_id = user.student_id or ""
    else:
        require_admin(user)
    return edit_request_service.list_edit_requests(db, student_id)


@router.post("/{request_id}/approve", response_model=EditRequestResponse, summary="Approuver une demande")
def approve_edit_request(
    request_id: int,
    db: Session = Depends(get_db),
    admin: AuthResult = Depends(require_admin),
):
    """Applique la valeur demandée à la fiche et clôture la demande (APPROVED)."""
    try:
        return edit_request_service.approve_edit_request(db, request_id, admin.username)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{request_id}/reject", response_model=EditRequestResponse, summary="Refuser une demande")
def reject_edit_request(
    request_id: int,
    data: Optional[EditRequestReject] = None,
    db: Session = Depends(get_db),
    admin: AuthResult = Depends(require_admin),
):
    """Clôture la demande (REJECTED) sans toucher à la fiche."""
    reason = data.reason if data is not None else None
    try:
        return edit_request_service.reject_edit_request(db, request_id, admin.username, reason)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
