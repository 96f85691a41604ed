"""
Router pour la prise de présences (enseignants) et l'historique (élèves).
"""

import datetime as dt
import uuid
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import Principal, require_roles
from app.database import get_db
from app.exceptions import ServiceError
from app.models.user import Role
from app.schemas.attendance import (
    AttendanceMark,
    AttendanceMarkResponse,
    RosterResponse,
    StudentAttendanceResponse,
)
from app.services import attendance_service

router = APIRouter(prefix="/api", tags=["Présences"])


@router.post("/teacher/attendance", response_model=AttendanceMarkResponse, summary="Enregistrer les présences")
def mark_attendance(
    data: AttendanceMark,
    _: Principal = Depends(require_roles(Role.TEACHER, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    """
    Crée ou met à jour la présence du jour pour chaque élève du lot.
    Le lot est enregistré entièrement ou pas du tout.
    """
    try:
        saved = attendance_service.mark_attendance(db, data.class_id, data.records)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return AttendanceMarkResponse(message="Présences enregistrées.", saved=saved)


@router.get("/teacher/students", response_model=RosterResponse, summary="Élèves d'une classe et présences du jour")
def class_roster(
    class_id: uuid.UUID = Query(alias="classId"),
    day: Optional[Union[dt.date, dt.datetime]] = Query(None, alias="date"),
    _: Principal = Depends(require_roles()),
    db: Session = Depends(get_db),
):
    """Sans `date`, le jour courant est utilisé. Un élève sans ligne n'a pas encore été pointé."""
    if day is not None:
        day = attendance_service.to_calendar_day(day)
    return attendance_service.get_class_roster(db, class_id, day)


@router.get("/student/attendance", response_model=StudentAttendanceResponse, summary="Mes présences")
def my_attendance(
    principal: Principal = Depends(require_roles(Role.STUDENT)),
    db: Session = Depends(get_db),
):
    """Les 30 dernières présences de l'élève connecté et ses statistiques globales."""
    return attendance_service.get_student_attendance(db, principal.id)
