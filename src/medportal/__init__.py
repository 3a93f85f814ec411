"""Medical document upload-and-retrieval portal."""

from .exceptions import (
    MedPortalError,
    NotFound,
    PersistenceError,
    StorageError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "MedPortalError",
    "NotFound",
    "PersistenceError",
    "StorageError",
    "ValidationError",
]
