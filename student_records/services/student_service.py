"""
Service métier pour les fiches élèves.
Création, mise à jour complète, suppression, listage et recherche.
"""

import logging
import re
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_records.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from student_records.models.student import Student
from student_records.schemas.student import StudentCreate, StudentFields, StudentResponse, StudentUpdate
from student_records.services import auth_service

logger = logging.getLogger(__name__)

DOB_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SEARCHABLE_COLUMNS = (
    Student.id,
    Student.name,
    Student.father_name,
    Student.course,
    Student.semester,
    Student.phone,
    Student.email,
    Student.address,
)


def _today() -> date:
    return date.today()


def compute_age(dob: Optional[str]) -> Optional[int]:
    """
    Âge en années révolues à la date du jour.
    Retourne None si dob est vide, mal formé (autre que YYYY-MM-DD) ou dans le futur.
    Aucune exception : une date illisible est une saisie courante, pas une erreur.
    """
    if dob is None:
        return None
    value = dob.strip()
    if not DOB_PATTERN.match(value):
        return None
    try:
        born = date.fromisoformat(value)
    except ValueError:
        return None

    today = _today()
    if born > today:
        return None
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def join_course_semester(course: Optional[str], semester: Optional[str]) -> str:
    """Libellé « Filière - Semestre », ou la seule valeur présente, ou chaîne vide."""
    course = (course or "").strip()
    semester = (semester or "").strip()
    if course and semester:
        return f"{course} - {semester}"
    return course or semester


def split_section(section: Optional[str]) -> Tuple[str, str]:
    """
    Découpe l'ancien champ section en (filière, semestre).
    "BCA - Sem 3" → ("BCA", "Sem 3") ; "Sem 3" → ("", "Sem 3") ; "BCA" → ("BCA", "").
    """
    if section is None:
        return "", ""
    s = section.strip()
    if " - " in s:
        course, semester = s.split(" - ", 1)
        return course.strip(), semester.strip()
    if s.lower().startswith("sem"):
        return "", s
    return s, ""


def create_student(db: Session, data: StudentCreate, create_account: bool = True) -> StudentResponse:
    """
    Crée une fiche élève.

    Étapes :
    1. Refuser un matricule vide
    2. Calculer l'âge depuis dob
    3. Créer le compte élève (identifiant = mot de passe = matricule) s'il n'existe pas
    4. Valider le tout en une seule transaction

    Lève ValidationError si le matricule est vide, DuplicateKeyError s'il existe déjà.
    """
    if not data.id or not data.id.strip():
        raise ValidationError("Le matricule de l'élève est obligatoire.")
    student_id = data.id.strip()

    if db.get(Student, student_id) is not None:
        raise DuplicateKeyError(f"Un élève avec le matricule '{student_id}' existe déjà.")

    create_user = create_account and not auth_service.user_exists(db, student_id)

    student = Student(id=student_id, **_column_values(data))
    db.add(student)
    if create_user:
        db.add(auth_service.new_user(
            username=student_id,
            password=student_id,
            role="student",
            student_id=student_id,
            must_change_password=True,
        ))

    # Filet pour une insertion concurrente entre la vérification et le commit
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateKeyError(f"Un élève avec le matricule '{student_id}' existe déjà.")
    db.refresh(student)

    logger.info("Élève créé : %s (âge %s)", student.id, student.age)
    return _to_response(student)


def get_student(db: Session, student_id: str) -> StudentResponse:
    """Retourne une fiche par son matricule. Lève NotFoundError si inexistante."""
    student = db.get(Student, student_id)
    if student is None:
        raise NotFoundError(f"Aucun élève avec le matricule '{student_id}'.")
    return _to_response(student)


def update_student(db: Session, student_id: str, data: StudentUpdate) -> StudentResponse:
    """
    Remplace toutes les colonnes modifiables d'une fiche.
    L'âge est recalculé depuis dob à chaque mise à jour, même si dob n'a pas changé.
    """
    student = db.get(Student, student_id)
    if student is None:
        raise NotFoundError(f"Aucun élève avec le matricule '{student_id}'.")

    for field, value in _column_values(data).items():
        setattr(student, field, value)

    db.commit()
    db.refresh(student)
    return _to_response(student)


def delete_student(db: Session, student_id: str) -> None:
    """Supprime définitivement une fiche. Le compte utilisateur lié est conservé."""
    student = db.get(Student, student_id)
    if student is None:
        raise NotFoundError(f"Aucun élève avec le matricule '{student_id}'.")

    db.delete(student)
    db.commit()
    logger.info("Élève supprimé : %s", student_id)


def get_students(db: Session) -> List[StudentResponse]:
    """Retourne toutes les fiches, triées par nom sans tenir compte de la casse."""
    students = db.execute(
        select(Student).order_by(func.lower(Student.name), Student.id)
    ).scalars().all()
    return [_to_response(s) for s in students]


def search_students(db: Session, query: Optional[str]) -> List[StudentResponse]:
    """
    Recherche insensible à la casse : une fiche est retenue si `query` apparaît
    dans au moins un des huit champs de SEARCHABLE_COLUMNS.
    Les caractères % et _ de la requête sont pris littéralement.
    """
    if not query:
        return get_students(db)

    needle = query.lower()
    students = db.execute(
        select(Student)
        .where(or_(*[
            func.lower(column).contains(needle, autoescape=True)
            for column in SEARCHABLE_COLUMNS
        ]))
        .order_by(func.lower(Student.name), Student.id)
    ).scalars().all()
    return [_to_response(s) for s in students]


def _column_values(data: StudentFields) -> dict:
    """Valeurs à écrire en base, âge calculé et section éclatée en filière/semestre."""
    course, semester = data.course, data.semester
    if data.section and not course and not semester:
        course, semester = split_section(data.section)

    return {
        "name": data.name,
        "father_name": data.father_name,
        "dob": data.dob,
        "gender": data.gender,
        "age": compute_age(data.dob),
        "email": data.email,
        "phone": data.phone,
        "address": data.address,
        "course": course,
        "semester": semester,
    }


def _to_response(student: Student) -> StudentResponse:
    """Construit la ligne de réponse avec le libellé filière/semestre."""
    return StudentResponse(
        id=student.id,
        name=student.name,
        father_name=student.father_name,
        dob=student.dob,
        gender=student.gender,
        phone=student.phone,
        course_semester=join_course_semester(student.course, student.semester),
        email=student.email,
        address=student.address,
        age=student.age,
        course=student.course,
        semester=student.semester,
    )
