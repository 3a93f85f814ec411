"""Document lifecycle: upload, list, fetch-for-download and delete.

The two stores are never written in one transaction. The ordering is
fixed instead:

* upload writes the blob first, then inserts the metadata row;
* delete removes the blob first, then the metadata row.

A failure between the two steps is logged and left for reconciliation:
an upload can leave an orphaned blob, a delete can leave a record whose
blob is gone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..app.settings import MAX_UPLOAD_BYTES
from ..exceptions import MedPortalError, PersistenceError, ValidationError
from ..storage.local import LocalBlobStore
from .metadata import MetadataStore
from .schemas import DocumentRecord

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class DownloadedDocument:
    content: bytes
    filename: str
    media_type: str = PDF_MEDIA_TYPE


class DocumentService:
    def __init__(
        self,
        metadata: MetadataStore,
        blobs: LocalBlobStore,
        *,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self.metadata = metadata
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes

    def validate_upload(self, size: int, original_filename: str | None, content_type: str | None) -> str:
        """Return the filename to record, or raise ValidationError for anything the upload step must refuse."""
        if not original_filename:
            raise ValidationError("No file uploaded")
        if content_type != PDF_MEDIA_TYPE:
            raise ValidationError("Only PDF files are allowed")
        if size > self.max_upload_bytes:
            limit_mib = self.max_upload_bytes / (1024 * 1024)
            raise ValidationError(f"File exceeds the maximum size of {limit_mib:g} MB")
        return original_filename

    async def upload(self, data: bytes, original_filename: str | None, content_type: str | None) -> DocumentRecord:
        filename = self.validate_upload(len(data), original_filename, content_type)

        storage_path = await self.blobs.write(data, filename)
        try:
            record = await self.metadata.insert(filename, storage_path, len(data))
        except PersistenceError:
            logger.error(
                "Metadata insert failed after blob write; orphaned blob left at %s",
                storage_path,
                extra={"storage_path": storage_path},
            )
            raise
        logger.info(
            "Uploaded %r as document %s (%d bytes)",
            filename,
            record.id,
            record.size_bytes,
            extra={"document_id": record.id, "storage_path": storage_path},
        )
        return record

    async def list(self) -> list[DocumentRecord]:
        return await self.metadata.list_all()

    async def fetch_for_download(self, document_id: int) -> DownloadedDocument:
        record = await self.metadata.get(document_id)
        try:
            content = await self.blobs.read(record.storage_path)
        except MedPortalError:
            logger.warning(
                "Document %s has no readable blob at %s",
                document_id,
                record.storage_path,
                extra={"document_id": document_id, "storage_path": record.storage_path},
            )
            raise
        return DownloadedDocument(content=content, filename=record.original_filename)

    async def delete(self, document_id: int) -> None:
        record = await self.metadata.get(document_id)
        await self.blobs.delete(record.storage_path)
        try:
            await self.metadata.delete(document_id)
        except PersistenceError:
            logger.error(
                "Blob removed but metadata delete failed; document %s now dangles",
                document_id,
                extra={"document_id": document_id, "storage_path": record.storage_path},
            )
            raise
