"""
Erreurs métier levées par les services.
Chaque router les traduit en HTTPException avec le code adapté.
"""


class StudentRecordsError(Exception):
    """Base de toutes les erreurs métier."""


class ValidationError(StudentRecordsError, ValueError):
    """Entrée mal formée : champ obligatoire vide, champ non autorisé, valeur non numérique."""


class NotFoundError(StudentRecordsError):
    """L'identifiant ou le nom d'utilisateur ciblé n'existe pas."""


class DuplicateKeyError(StudentRecordsError):
    """Insertion en collision avec une clé primaire existante."""


class ConflictError(StudentRecordsError):
    """Transition refusée : la demande n'est pas (ou plus) ouverte."""


class AuthError(StudentRecordsError):
    """Identifiants invalides."""


class AuthorizationError(AuthError):
    """Identifiants valides mais rôle insuffisant, ou identifiants administrateur invalides."""


class StorageInitError(StudentRecordsError):
    """Base inaccessible ou migration du schéma en échec."""
