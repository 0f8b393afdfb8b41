"""Erreurs du domaine"""


class StorageError(Exception):
    """Une lecture ou écriture sur le store a échoué (réseau, permission, validation)."""

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        message = f"Storage operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidTransition(ValueError):
    """Valeur de statut ou de priorité inconnue."""
