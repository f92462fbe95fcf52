"""
Error taxonomy for the dashboard core.

Structural and referential problems are rejected before any mutation happens.
Storage failures are reported after the in-memory change has been applied.
"""
from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    REFERENTIAL_INTEGRITY = "referential_integrity"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    AUTHENTICATION = "authentication"


class DashboardError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Field-level validation failure; ``errors`` maps field name to message."""
    kind = ErrorKind.VALIDATION

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        super().__init__(message or "; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class ReferentialIntegrityError(DashboardError):
    kind = ErrorKind.REFERENTIAL_INTEGRITY

    def __init__(self, entity: str, patient_id):
        self.entity = entity
        self.patient_id = patient_id
        super().__init__(f"Cannot add {entity}: patient {patient_id} does not exist")


class StorageError(DashboardError):
    """Write-through failure. The in-memory state is already updated."""
    kind = ErrorKind.STORAGE

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)


class AuthenticationError(DashboardError):
    kind = ErrorKind.AUTHENTICATION


class ReentrantDispatchError(DashboardError):
    """Raised when a listener changes selection or view while being notified."""
    kind = ErrorKind.VALIDATION
