"""
Service métier pour les présences journalières.

Stratégie d'écriture :
- chaque date reçue est ramenée à son jour calendaire local (heure ignorée)
- une seule ligne par (élève, classe, jour), garantie par la contrainte d'unicité
- INSERT ... ON CONFLICT DO UPDATE : pas de lecture préalable, pas de course
- tout le lot est commité en une seule transaction (tout ou rien)
"""

import datetime as dt
import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.attendance import Attendance, AttendanceStatus
from app.models.school_class import SchoolClass
from app.schemas.attendance import (
    AttendanceHistoryItem,
    AttendanceRecordIn,
    AttendanceStats,
    HistoryClass,
    RosterAttendance,
    RosterResponse,
    StudentAttendanceResponse,
)
from app.services.class_service import get_class_students

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def to_calendar_day(value: Union[dt.datetime, dt.date]) -> dt.date:
    """Jour calendaire local d'un horodatage. Un horodatage avec fuseau est d'abord converti en heure locale."""
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def _upsert_statement(db: Session, rows: List[dict]):
    dialect = db.get_bind().dialect.name
    try:
        insert = _UPSERT_DIALECTS[dialect]
    except KeyError:
        raise RuntimeError(f"Dialecte non supporté pour l'upsert des présences : {dialect}")

    stmt = insert(Attendance).values(rows)
    return stmt.on_conflict_do_update(
        index_elements=["student_id", "class_id", "date"],
        set_={"status": stmt.excluded.status, "updated_at": func.now()},
    )


def mark_attendance(db: Session, class_id: uuid.UUID, records: List[AttendanceRecordIn]) -> int:
    """
    Enregistre les présences d'une classe.

    Pour chaque ligne : crée la présence du jour ou remplace son statut.
    Deux lignes du lot pour le même élève et le même jour : la dernière l'emporte.
    Lève NotFoundError si la classe n'existe pas. Retourne le nombre de lignes écrites.
    """
    if db.get(SchoolClass, class_id) is None:
        raise NotFoundError("Classe introuvable.")

    # Dédoublonnage intra-lot : ON CONFLICT ne peut pas toucher deux fois la même ligne
    by_key = {}
    for record in records:
        day = to_calendar_day(record.date)
        by_key[(record.student_id, day)] = {
            "id": uuid.uuid4(),
            "student_id": record.student_id,
            "class_id": class_id,
            "date": day,
            "status": AttendanceStatus(record.status).value,
        }

    rows = list(by_key.values())
    if not rows:
        return 0

    try:
        db.execute(_upsert_statement(db, rows))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise NotFoundError("Un ou plusieurs élèves sont introuvables.")
    except Exception:
        db.rollback()
        raise

    logger.info("Présences enregistrées pour la classe %s : %d ligne(s)", class_id, len(rows))
    return len(rows)


def get_class_roster(db: Session, class_id: uuid.UUID, day: Optional[dt.date] = None) -> RosterResponse:
    """
    Élèves inscrits + présences déjà saisies pour ce jour.
    Un élève sans ligne n'a pas de statut : aucune présence n'est créée à la lecture.
    """
    day = day or dt.date.today()
    students = get_class_students(db, class_id)

    rows = db.execute(
        select(Attendance.student_id, Attendance.status)
        .where(Attendance.class_id == class_id, Attendance.date == day)
    ).all()

    return RosterResponse(
        students=students,
        attendance=[RosterAttendance(student_id=sid, status=status) for sid, status in rows],
    )


def get_student_attendance(db: Session, student_id: uuid.UUID) -> StudentAttendanceResponse:
    """
    Historique (30 dernières présences) et statistiques sur tout l'historique de l'élève.
    Les compteurs ne sont pas limités aux 30 lignes retournées.
    """
    history_rows = db.execute(
        select(Attendance, SchoolClass.name, SchoolClass.code)
        .join(SchoolClass, SchoolClass.id == Attendance.class_id)
        .where(Attendance.student_id == student_id)
        .order_by(Attendance.date.desc())
        .limit(HISTORY_LIMIT)
    ).all()

    counts = dict(db.execute(
        select(Attendance.status, func.count())
        .where(Attendance.student_id == student_id)
        .group_by(Attendance.status)
    ).all())

    stats = AttendanceStats(
        total=sum(counts.values()),
        present=counts.get(AttendanceStatus.PRESENT.value, 0),
        absent=counts.get(AttendanceStatus.ABSENT.value, 0),
        late=counts.get(AttendanceStatus.LATE.value, 0),
        excused=counts.get(AttendanceStatus.EXCUSED.value, 0),
    )

    history = [
        AttendanceHistoryItem(
            id=attendance.id,
            class_id=attendance.class_id,
            date=attendance.date,
            status=attendance.status,
            school_class=HistoryClass(name=name, code=code),
        )
        for attendance, name, code in history_rows
    ]

    return StudentAttendanceResponse(stats=stats, history=history)
