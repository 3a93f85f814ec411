from .local import (
    FALLBACK_NAME,
    LocalBlobStore,
    generate_storage_name,
    sanitize_filename,
    storage_name_timestamp,
)

__all__ = [
    "FALLBACK_NAME",
    "LocalBlobStore",
    "generate_storage_name",
    "sanitize_filename",
    "storage_name_timestamp",
]
