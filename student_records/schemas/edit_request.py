"""
Schémas Pydantic pour les demandes de modification de fiche.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

RequestStatus = Literal["OPEN", "APPROVED", "REJECTED"]


class EditRequestCreate(BaseModel):
    """Corps de POST /edit-requests. Le champ est normalisé et contrôlé par le service."""
    student_id: str
    field: str
    new_value: str
    message: Optional[str] = None

    @field_validator("new_value")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("La nouvelle valeur ne peut pas être vide.")
        return v.strip()


class EditRequestReject(BaseModel):
    """Motif de refus (optionnel)."""
    reason: Optional[str] = None


class EditRequestResponse(BaseModel):
    id: int
    student_id: str
    field: str
    new_value: Optional[str]
    message: Optional[str]
    status: RequestStatus
    created_at: datetime
    handled_by: Optional[str]
    handled_at: Optional[datetime]
    handled_reason: Optional[str]

    model_config = {"from_attributes": True}
