"""
Modèles SQLAlchemy pour les classes et les inscriptions.
Nommé school_class pour éviter le conflit avec le mot-clé Python 'class'.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func

from app.database import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, nullable=False)
    # Un enseignant supprimé laisse la classe sans responsable
    teacher_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Enrollment(Base):
    """Association élève ↔ classe."""
    __tablename__ = "enrollments"

    student_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)
    enrolled_at = Column(DateTime, server_default=func.now())
