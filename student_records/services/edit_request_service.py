"""
Service métier pour les demandes de modification de fiche.

Un élève propose une nouvelle valeur pour un champ de sa fiche ; un administrateur
l'approuve (la valeur est alors écrite sur la fiche) ou la refuse.

Transitions : OPEN → APPROVED, OPEN → REJECTED. Les deux états finaux sont terminaux.
"""

import logging
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from student_records.exceptions import ConflictError, NotFoundError, ValidationError
from student_records.models.edit_request import EditRequest
from student_records.models.student import Student
from student_records.schemas.edit_request import EditRequestResponse
from student_records.services.student_service import compute_age

logger = logging.getLogger(__name__)

# Seules colonnes de students modifiables par une demande.
# Le nom de colonne est utilisé tel quel dans l'UPDATE : la liste est le seul garde-fou.
ALLOWED_FIELDS = (
    "name",
    "father_name",
    "gender",
    "dob",
    "age",
    "email",
    "phone",
    "address",
    "course",
    "semester",
)

FIELD_SYNONYMS = {
    "father": "father_name",
}

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
INTEGER_MIN = -2**63
INTEGER_MAX = 2**63 - 1


def normalize_field(field: Optional[str]) -> str:
    """
    Retourne le nom de colonne canonique d'un champ saisi ("DOB" → "dob",
    "Father" → "father_name"). Lève ValidationError si le champ n'est pas autorisé.
    """
    if field is None:
        raise ValidationError("Le champ à modifier est obligatoire.")
    key = re.sub(r"[\s-]+", "_", field.strip().lower())
    key = FIELD_SYNONYMS.get(key, key)
    if key not in ALLOWED_FIELDS:
        raise ValidationError(f"Le champ '{field}' ne peut pas faire l'objet d'une demande.")
    return key


def create_edit_request(
    db: Session,
    student_id: str,
    field: str,
    new_value: str,
    message: Optional[str] = None,
) -> EditRequestResponse:
    """
    Enregistre une demande en statut OPEN.
    La valeur n'est pas contrôlée ici (âge et date le sont à l'approbation).
    """
    if not student_id or not student_id.strip():
        raise ValidationError("Le matricule de l'élève est obligatoire.")
    column = normalize_field(field)

    request = EditRequest(
        student_id=student_id.strip(),
        field=column,
        new_value=new_value,
        message=message,
        status="OPEN",
        created_at=datetime.now(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    logger.info("Demande %d créée : élève %s, champ %s", request.id, request.student_id, column)
    return EditRequestResponse.model_validate(request)


def list_edit_requests(db: Session, student_id: Optional[str] = None) -> List[EditRequestResponse]:
    """Retourne les demandes, de la plus récente à la plus ancienne, quel que soit leur statut."""
    query = select(EditRequest).order_by(EditRequest.created_at.desc(), EditRequest.id.desc())
    if student_id is not None:
        query = query.where(EditRequest.student_id == student_id)

    requests = db.execute(query).scalars().all()
    return [EditRequestResponse.model_validate(r) for r in requests]


def approve_edit_request(db: Session, request_id: int, admin_username: str) -> EditRequestResponse:
    """
    Approuve une demande OPEN et applique la modification à la fiche.

    Étapes (une seule transaction) :
    1. Lire la demande uniquement si elle est OPEN
    2. Recontrôler le champ contre ALLOWED_FIELDS
    3. Écrire la valeur sur la fiche (age : entier ; dob : recalcul de l'âge)
    4. Passer la demande à APPROVED, conditionné à status = 'OPEN'

    Lève ConflictError si la demande est introuvable ou déjà traitée,
    ValidationError si le champ ou la valeur est invalide,
    NotFoundError si la fiche ciblée n'existe plus. Rien n'est écrit en cas d'erreur.
    """
    try:
        request = db.execute(
            select(EditRequest).where(
                EditRequest.id == request_id,
                EditRequest.status == "OPEN",
            )
        ).scalar_one_or_none()
        if request is None:
            raise ConflictError(f"Demande {request_id} introuvable ou déjà traitée.")

        column = normalize_field(request.field)
        values = _values_for(column, request.new_value)

        applied = db.execute(
            update(Student)
            .where(Student.id == request.student_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if applied.rowcount == 0:
            raise NotFoundError(f"Aucun élève avec le matricule '{request.student_id}'.")

        # Seul verrou contre une double approbation : l'UPDATE conditionnel sur OPEN
        flipped = db.execute(
            update(EditRequest)
            .where(
                EditRequest.id == request_id,
                EditRequest.status == "OPEN",
            )
            .values(
                status="APPROVED",
                handled_by=admin_username,
                handled_at=datetime.now(),
            )
            .execution_options(synchronize_session=False)
        )
        if flipped.rowcount == 0:
            raise ConflictError(f"Demande {request_id} introuvable ou déjà traitée.")

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    logger.info(
        "Demande %d approuvée par %s : élève %s, %s = %r",
        request_id, admin_username, request.student_id, column, request.new_value,
    )
    return EditRequestResponse.model_validate(request)


def reject_edit_request(
    db: Session,
    request_id: int,
    admin_username: str,
    reason: Optional[str] = None,
) -> EditRequestResponse:
    """
    Refuse une demande OPEN. La fiche de l'élève n'est pas modifiée.
    Un seul UPDATE conditionnel : zéro ligne touchée → ConflictError.
    """
    result = db.execute(
        update(EditRequest)
        .where(
            EditRequest.id == request_id,
            EditRequest.status == "OPEN",
        )
        .values(
            status="REJECTED",
            handled_by=admin_username,
            handled_at=datetime.now(),
            handled_reason=reason,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        logger.warning("Refus impossible : demande %s introuvable ou déjà traitée", request_id)
        raise ConflictError(f"Demande {request_id} introuvable ou déjà traitée.")
    db.commit()

    request = db.get(EditRequest, request_id)
    db.refresh(request)
    logger.info("Demande %d refusée par %s", request_id, admin_username)
    return EditRequestResponse.model_validate(request)


def _values_for(column: str, new_value: Optional[str]) -> dict:
    """Colonnes de students à écrire pour une demande approuvée."""
    if column == "age":
        raw = (new_value or "").strip()
        if not INTEGER_PATTERN.match(raw):
            raise ValidationError(f"Âge invalide : '{new_value}' n'est pas un entier.")
        age = int(raw)
        # Plage d'un INTEGER SQLite (entier signé sur 64 bits)
        if not INTEGER_MIN <= age <= INTEGER_MAX:
            raise ValidationError(f"Âge invalide : '{new_value}' est hors limites.")
        return {"age": age}
    if column == "dob":
        return {"dob": new_value, "age": compute_age(new_value)}
    return {column: new_value}
