"""
Schémas Pydantic pour les fiches élèves.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, field_validator

# Ordre des colonnes d'un tableau de fiches (une ligne = un StudentResponse)
TABLE_COLUMNS = (
    "id",
    "name",
    "father_name",
    "dob",
    "gender",
    "phone",
    "course_semester",
    "email",
    "address",
    "age",
    "course",
    "semester",
)

_TEXT_FIELDS = (
    "name", "father_name", "dob", "gender", "email",
    "phone", "address", "course", "semester", "section",
)


class StudentFields(BaseModel):
    """Champs modifiables d'une fiche. `section` accepte l'ancien format « Filière - Semestre »."""
    name: Optional[str] = None
    father_name: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[str] = None
    section: Optional[str] = None

    @field_validator(*_TEXT_FIELDS)
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class StudentCreate(StudentFields):
    """Schéma de création d'une fiche (POST /students). Le matricule est obligatoire."""
    id: str

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        # Le refus d'un matricule vide est fait par le service (ValidationError)
        return v.strip()


class StudentUpdate(StudentFields):
    """
    Schéma de mise à jour (PUT /students/{id}).
    Remplacement complet : un champ absent est remis à NULL.
    """


class StudentResponse(BaseModel):
    """Une ligne du tableau des fiches, dans l'ordre de TABLE_COLUMNS."""
    id: str
    name: Optional[str]
    father_name: Optional[str]
    dob: Optional[str]
    gender: Optional[str]
    phone: Optional[str]
    course_semester: str
    email: Optional[str]
    address: Optional[str]
    age: Optional[int]
    course: Optional[str]
    semester: Optional[str]

    def as_row(self) -> Tuple:
        return tuple(getattr(self, column) for column in TABLE_COLUMNS)
