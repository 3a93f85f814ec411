"""Document metadata, lifecycle service and HTTP routes."""

from .metadata import MetadataStore
from .reconcile import ReconcileReport, reconcile
from .schemas import DocumentListResponse, DocumentRecord
from .service import PDF_MEDIA_TYPE, DocumentService, DownloadedDocument

__all__ = [
    "MetadataStore",
    "ReconcileReport",
    "reconcile",
    "DocumentListResponse",
    "DocumentRecord",
    "PDF_MEDIA_TYPE",
    "DocumentService",
    "DownloadedDocument",
]
