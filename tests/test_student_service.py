"""
Tests du service des fiches élèves : calcul de l'âge, libellé filière/semestre,
création, mise à jour, suppression, listage et recherche.
"""

from datetime import date
from unittest.mock import patch

import pytest

from student_records.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from student_records.models.user import User
from student_records.schemas.student import TABLE_COLUMNS, StudentCreate, StudentUpdate
from student_records.services import auth_service
from student_records.services.student_service import (
    compute_age,
    create_student,
    delete_student,
    get_student,
    get_students,
    join_course_semester,
    search_students,
    split_section,
    update_student,
)

REFERENCE_DAY = date(2024, 6, 1)


@pytest.fixture
def today():
    with patch("student_records.services.student_service._today", return_value=REFERENCE_DAY):
        yield REFERENCE_DAY


def make_student(db, student_id="S1", **fields):
    return create_student(db, StudentCreate(id=student_id, **fields))


# --- compute_age ---

@pytest.mark.parametrize("dob, expected", [
    ("2000-01-01", 24),
    ("2000-06-01", 24),   # anniversaire le jour même
    ("2000-06-02", 23),   # anniversaire demain
    ("2024-06-01", 0),
    ("2024-06-02", None),  # dans le futur
    ("2000-02-29", 24),
])
def test_compute_age_annees_revolues(today, dob, expected):
    assert compute_age(dob) == expected


@pytest.mark.parametrize("dob", [None, "", "   ", "01/01/2000", "2000-1-1", "2000-13-01", "2000-02-30", "hier"])
def test_compute_age_date_illisible_donne_none(today, dob):
    assert compute_age(dob) is None


def test_compute_age_29_fevrier_annee_non_bissextile():
    with patch("student_records.services.student_service._today", return_value=date(2001, 2, 28)):
        assert compute_age("2000-02-29") == 0


# --- join_course_semester / split_section ---

def test_join_course_semester():
    assert join_course_semester("BCA", "Sem 3") == "BCA - Sem 3"
    assert join_course_semester("BCA", None) == "BCA"
    assert join_course_semester("  ", "Sem 3") == "Sem 3"
    assert join_course_semester(None, None) == ""


def test_split_section():
    assert split_section("BCA - Sem 3") == ("BCA", "Sem 3")
    assert split_section("Semester 2") == ("", "Semester 2")
    assert split_section("MBA") == ("MBA", "")
    assert split_section(None) == ("", "")


# --- create_student ---

def test_create_student_calcule_age(db, today):
    result = make_student(db, "S1", name="Asha", dob="2000-01-01")
    assert result.age == 24
    assert get_student(db, "S1").age == 24


def test_create_student_sans_dob_age_null(db, today):
    result = make_student(db, "S1", name="Asha", dob="pas une date")
    assert result.age is None
    assert result.dob == "pas une date"


def test_create_student_matricule_vide(db):
    with pytest.raises(ValidationError):
        create_student(db, StudentCreate(id="   ", name="Sans matricule"))


def test_create_student_matricule_duplique(db):
    make_student(db, "S1", name="Asha")
    with pytest.raises(DuplicateKeyError, match="existe déjà"):
        make_student(db, "S1", name="Autre")
    assert get_student(db, "S1").name == "Asha"


def test_create_student_cree_le_compte_eleve(db):
    make_student(db, "S1", name="Asha")
    user = db.get(User, "S1")
    assert user is not None
    assert user.role == "student"
    assert user.student_id == "S1"
    assert user.must_change_password is True
    assert auth_service.authenticate(db, "S1", "S1").ok


def test_create_student_compte_existant_conserve(db):
    auth_service.create_user(db, "S1", "deja-la", "student", student_id="S1")
    make_student(db, "S1", name="Asha")
    assert auth_service.authenticate(db, "S1", "deja-la").ok
    assert not auth_service.authenticate(db, "S1", "S1").ok


def test_create_student_section_eclatee(db):
    result = make_student(db, "S1", section="BCA - Sem 3")
    assert result.course == "BCA"
    assert result.semester == "Sem 3"
    assert result.course_semester == "BCA - Sem 3"


def test_create_student_course_prioritaire_sur_section(db):
    result = make_student(db, "S1", course="MCA", section="BCA - Sem 3")
    assert result.course == "MCA"
    assert result.semester is None


# --- update_student ---

def test_update_student_recalcule_age(db, today):
    make_student(db, "S1", name="Asha", dob="2000-01-01")
    result = update_student(db, "S1", StudentUpdate(name="Asha K", dob="2010-01-01"))
    assert result.name == "Asha K"
    assert result.age == 14


def test_update_student_remplacement_complet(db):
    make_student(db, "S1", name="Asha", phone="0600", course="BCA")
    result = update_student(db, "S1", StudentUpdate(name="Asha"))
    assert result.phone is None
    assert result.course is None
    assert result.course_semester == ""


def test_update_student_inexistant(db):
    with pytest.raises(NotFoundError):
        update_student(db, "INCONNU", StudentUpdate(name="X"))


# --- delete_student ---

def test_delete_student(db):
    make_student(db, "S1", name="Asha")
    delete_student(db, "S1")
    with pytest.raises(NotFoundError):
        get_student(db, "S1")
    # Le compte utilisateur reste en place
    assert auth_service.user_exists(db, "S1")


def test_delete_student_inexistant(db):
    with pytest.raises(NotFoundError):
        delete_student(db, "INCONNU")


# --- get_students / search_students ---

def test_get_students_tri_par_nom_sans_casse(db):
    make_student(db, "S1", name="charlie")
    make_student(db, "S2", name="Alice")
    make_student(db, "S3", name="bob")
    assert [s.name for s in get_students(db)] == ["Alice", "bob", "charlie"]


def test_search_insensible_a_la_casse_sur_chaque_champ(db):
    make_student(db, "R-100", name="Asha", father_name="Ravi", course="BCA", semester="Sem 1",
                 phone="0611", email="asha@mail.test", address="12 rue Verte")
    make_student(db, "R-200", name="Bilal")

    for q in ["r-1", "ASHA", "ravi", "bca", "SEM 1", "0611", "@MAIL", "verte"]:
        assert [s.id for s in search_students(db, q)] == ["R-100"], q


def test_search_ne_cherche_pas_dans_gender_ni_dob(db):
    make_student(db, "S1", name="Asha", gender="Female", dob="2000-01-01")
    assert search_students(db, "female") == []
    assert search_students(db, "2000") == []


def test_search_caracteres_joker_litteraux(db):
    make_student(db, "S1", name="100% Asha")
    make_student(db, "S2", name="Bilal")
    assert [s.id for s in search_students(db, "%")] == ["S1"]
    assert search_students(db, "_") == []


def test_search_vide_equivaut_a_get_students(db):
    make_student(db, "S1", name="zoe")
    make_student(db, "S2", name="Adam")
    assert search_students(db, "") == get_students(db)


def test_response_as_row_suit_l_ordre_des_colonnes(db):
    result = make_student(db, "S1", name="Asha", course="BCA", semester="Sem 2")
    row = result.as_row()
    assert len(row) == len(TABLE_COLUMNS)
    assert row[TABLE_COLUMNS.index("course_semester")] == "BCA - Sem 2"
    assert row[0] == "S1"
