# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# user.py doit être chargé avant school_class.py et attendance.py (FK → users.id).

from app.models.user import User  # noqa: F401, doit précéder les autres
from app.models.school_class import SchoolClass, Enrollment  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401
