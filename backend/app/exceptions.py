"""
Erreurs métier levées par les services.
Les routers les traduisent en HTTPException avec le code porté par chaque classe.
"""


class ServiceError(ValueError):
    status_code = 400


class ValidationError(ServiceError):
    """Entrée manquante ou invalide."""
    status_code = 400


class ConflictError(ServiceError):
    """Violation d'unicité (email, code de classe)."""
    status_code = 409


class NotFoundError(ServiceError):
    """Identifiant référencé inexistant."""
    status_code = 404
