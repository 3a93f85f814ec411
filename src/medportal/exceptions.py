"""Error kinds shared by the stores, the document service and the API layer."""

from __future__ import annotations


class MedPortalError(Exception):
    """Base class for every failure the portal reports to its callers."""

    code: str = "error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MedPortalError):
    """Input rejected before anything was written (media type, size, form fields)."""

    code = "validation_error"
    status_code = 400


class NotFound(MedPortalError):
    """A record id or a storage path does not exist."""

    code = "not_found"
    status_code = 404


class PersistenceError(MedPortalError):
    """The metadata store is unreachable or rejected the write."""

    code = "persistence_error"


class StorageError(MedPortalError):
    """Disk I/O failure in the blob store."""

    code = "storage_error"


__all__ = [
    "MedPortalError",
    "ValidationError",
    "NotFound",
    "PersistenceError",
    "StorageError",
]
