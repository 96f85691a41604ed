"""
Schémas Pydantic pour la prise de présences et l'historique élève.
"""

import datetime as dt
import uuid
from typing import List

from pydantic import Field

from app.models.attendance import AttendanceStatus
from app.schemas.common import CamelModel
from app.schemas.school_class import StudentSummary


class AttendanceRecordIn(CamelModel):
    """Une ligne de présence envoyée par l'enseignant. L'heure est ignorée."""
    student_id: uuid.UUID
    date: dt.datetime
    status: AttendanceStatus


class AttendanceMark(CamelModel):
    class_id: uuid.UUID
    records: List[AttendanceRecordIn]


class AttendanceMarkResponse(CamelModel):
    message: str
    saved: int


class RosterAttendance(CamelModel):
    student_id: uuid.UUID
    status: AttendanceStatus


class RosterResponse(CamelModel):
    """Élèves inscrits + présences déjà saisies pour le jour demandé."""
    students: List[StudentSummary]
    attendance: List[RosterAttendance]


class HistoryClass(CamelModel):
    name: str
    code: str


class AttendanceHistoryItem(CamelModel):
    id: uuid.UUID
    class_id: uuid.UUID
    date: dt.date
    status: AttendanceStatus
    school_class: HistoryClass = Field(alias="class")


class AttendanceStats(CamelModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0


class StudentAttendanceResponse(CamelModel):
    stats: AttendanceStats
    history: List[AttendanceHistoryItem]
