"""
Modèle SQLAlchemy pour les présences journalières.

Une seule ligne par (élève, classe, jour) : la contrainte d'unicité est portée
par la base, l'écriture passe par INSERT ... ON CONFLICT DO UPDATE.
"""

import enum
import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func

from app.database import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EXCUSED = "EXCUSED"


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("student_id", "class_id", "date", name="uq_attendance_student_class_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)       # Jour calendaire, sans heure
    status = Column(String(20), nullable=False)  # PRESENT, ABSENT, LATE, EXCUSED

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
