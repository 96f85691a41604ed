"""
Tests unitaires pour le service des comptes utilisateurs.
La plupart tournent sur une base SQLite en mémoire (fixture `db`).
"""

import uuid
from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.auth.security import verify_password
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.attendance import Attendance
from app.models.school_class import Enrollment, SchoolClass
from app.models.user import User
from app.schemas.user import LoginRequest, UserRegister
from app.services import user_service
from app.services.user_service import InvalidCredentialsError


# --- Helpers ---

def register(db, email="alice@ecole.be", role=None, name="Alice", password="secret123"):
    return user_service.register_user(db, UserRegister(name=name, email=email, password=password, role=role))


def find_by_email(db, email):
    return db.execute(select(User).where(User.email == email)).scalar()


def make_user(db, role="STUDENT", name="Élève", email=None):
    user = User(name=name, email=email or f"{uuid.uuid4().hex[:8]}@ecole.be", password_hash="x", role=role)
    db.add(user)
    db.commit()
    return user


# ============================================================
# register_user
# ============================================================

def test_register_role_par_defaut_student(db):
    user_id = register(db)

    user = find_by_email(db, "alice@ecole.be")
    assert user.id == user_id
    assert user.role == "STUDENT"


def test_register_teacher_autorise(db):
    register(db, role="TEACHER")
    assert find_by_email(db, "alice@ecole.be").role == "TEACHER"


def test_register_admin_jamais_auto_attribue(db):
    register(db, role="ADMIN")
    assert find_by_email(db, "alice@ecole.be").role == "STUDENT"


def test_register_role_inconnu_devient_student(db):
    register(db, role="SUPERUSER")
    assert find_by_email(db, "alice@ecole.be").role == "STUDENT"


def test_register_mot_de_passe_hache(db):
    register(db, password="secret123")

    user = find_by_email(db, "alice@ecole.be")
    assert user.password_hash != "secret123"
    assert user.password_hash.startswith("$2")
    assert verify_password("secret123", user.password_hash)


def test_register_email_duplique(db):
    register(db)
    with pytest.raises(ConflictError):
        register(db, name="Autre")

    assert len(db.execute(select(User)).scalars().all()) == 1


@pytest.mark.parametrize("missing", ["name", "email", "password"])
def test_register_champ_manquant(db, missing):
    fields = {"name": "Alice", "email": "alice@ecole.be", "password": "secret123"}
    fields[missing] = None
    with pytest.raises(ValidationError):
        user_service.register_user(db, UserRegister(**fields))


def test_register_nom_blanc(db):
    """Un nom composé d'espaces est considéré comme manquant."""
    with pytest.raises(ValidationError):
        register(db, name="   ")


def test_register_mot_de_passe_trop_long(db):
    """bcrypt ne hache que 72 octets : au-delà, refus explicite plutôt qu'une erreur interne."""
    with pytest.raises(ValidationError):
        register(db, password="x" * 80)
    with pytest.raises(ValidationError):
        register(db, password="é" * 37)

    assert db.execute(select(User)).scalars().all() == []


def test_register_mot_de_passe_72_octets_accepte(db):
    register(db, password="x" * 72)
    assert verify_password("x" * 72, find_by_email(db, "alice@ecole.be").password_hash)


def test_register_course_concurrente_conflit():
    """IntegrityError au commit (inscription simultanée) → ConflictError + rollback."""
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None
    db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(ConflictError):
        register(db)
    db.rollback.assert_called_once()


# ============================================================
# authenticate
# ============================================================

def test_authenticate_succes(db):
    user_id = register(db, role="TEACHER", password="secret123")

    token = user_service.authenticate(db, LoginRequest(email="alice@ecole.be", password="secret123"))

    assert token.access_token
    assert token.user.id == user_id
    assert token.user.role == "TEACHER"


def test_authenticate_mauvais_mot_de_passe(db):
    register(db, password="secret123")
    with pytest.raises(InvalidCredentialsError):
        user_service.authenticate(db, LoginRequest(email="alice@ecole.be", password="mauvais"))


def test_authenticate_email_inconnu(db):
    with pytest.raises(InvalidCredentialsError):
        user_service.authenticate(db, LoginRequest(email="personne@ecole.be", password="x"))


def test_authenticate_champs_manquants(db):
    with pytest.raises(ValidationError):
        user_service.authenticate(db, LoginRequest(email="alice@ecole.be"))


# ============================================================
# list_users
# ============================================================

def test_list_users_avec_inscriptions(db):
    student = make_user(db, name="Alice")
    make_user(db, role="TEACHER", name="Prof")
    maths = SchoolClass(name="Maths", code="MATH-1")
    db.add(maths)
    db.commit()
    db.add(Enrollment(student_id=student.id, class_id=maths.id))
    db.commit()

    users = user_service.list_users(db)

    assert len(users) == 2
    by_id = {u.id: u for u in users}
    assert [e.school_class.code for e in by_id[student.id].enrollments] == ["MATH-1"]
    assert by_id[student.id].enrollments[0].class_id == maths.id
    assert all(u.enrollments == [] for u in users if u.id != student.id)


# ============================================================
# change_role
# ============================================================

def test_change_role_succes(db):
    user = make_user(db)

    result = user_service.change_role(db, user.id, "TEACHER")

    assert result.role == "TEACHER"
    assert db.get(User, user.id).role == "TEACHER"


def test_change_role_invalide_inchange(db):
    user = make_user(db)

    with pytest.raises(ValidationError):
        user_service.change_role(db, user.id, "INVALID")

    assert db.get(User, user.id).role == "STUDENT"


def test_change_role_utilisateur_introuvable(db):
    with pytest.raises(NotFoundError):
        user_service.change_role(db, uuid.uuid4(), "ADMIN")


# ============================================================
# delete_user
# ============================================================

@pytest.mark.parametrize("role", ["ADMIN", "TEACHER", "STUDENT"])
def test_delete_user_soi_meme_interdit(role):
    """Refusé quel que soit le rôle, sans toucher à la base."""
    db = MagicMock()
    user_id = uuid.uuid4()

    with pytest.raises(ValidationError):
        user_service.delete_user(db, user_id, acting_user_id=user_id)
    db.delete.assert_not_called()
    db.commit.assert_not_called()


def test_delete_user_cascade(db):
    admin = make_user(db, role="ADMIN")
    student = make_user(db)
    teacher = make_user(db, role="TEACHER")
    maths = SchoolClass(name="Maths", code="MATH-1", teacher_id=teacher.id)
    db.add(maths)
    db.commit()
    db.add(Enrollment(student_id=student.id, class_id=maths.id))
    db.add(Attendance(student_id=student.id, class_id=maths.id, date=date(2026, 3, 2), status="PRESENT"))
    db.commit()
    maths_id = maths.id

    user_service.delete_user(db, student.id, acting_user_id=admin.id)
    user_service.delete_user(db, teacher.id, acting_user_id=admin.id)

    assert db.execute(select(Enrollment)).scalars().all() == []
    assert db.execute(select(Attendance)).scalars().all() == []
    assert db.get(SchoolClass, maths_id).teacher_id is None


def test_delete_user_introuvable(db):
    with pytest.raises(NotFoundError):
        user_service.delete_user(db, uuid.uuid4(), acting_user_id=uuid.uuid4())


# ============================================================
# update_profile
# ============================================================

def test_update_profile_nom_trimme(db):
    user = make_user(db, name="Ancien")

    result = user_service.update_profile(db, user.id, "  Nouveau Nom  ")

    assert result.name == "Nouveau Nom"
    assert db.get(User, user.id).name == "Nouveau Nom"


@pytest.mark.parametrize("name", [None, "", "   "])
def test_update_profile_nom_vide(db, name):
    user = make_user(db, name="Ancien")

    with pytest.raises(ValidationError):
        user_service.update_profile(db, user.id, name)

    assert db.get(User, user.id).name == "Ancien"
