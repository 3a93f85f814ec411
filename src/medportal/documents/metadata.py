from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..db.engine import DBEngine
from ..db.repository import Repository
from ..exceptions import NotFound, PersistenceError
from .models import Document
from .schemas import DocumentRecord

logger = logging.getLogger(__name__)

# ids are signed 64-bit in every supported backend
MAX_DOCUMENT_ID = 2**63 - 1


def _require_valid_id(document_id: int) -> None:
    if not 1 <= document_id <= MAX_DOCUMENT_ID:
        raise NotFound("Document not found")


class MetadataStore:
    """Bookkeeping of stored documents in the ``documents`` table.

    Each call runs in its own transaction. There is no update operation.
    """

    def __init__(self, db: DBEngine):
        self.db = db

    async def insert(self, original_filename: str, storage_path: str, size_bytes: int) -> DocumentRecord:
        try:
            async with self.db.transaction() as session:
                row = await Repository(session, Document).create(
                    original_filename=original_filename,
                    storage_path=storage_path,
                    size_bytes=size_bytes,
                )
                record = DocumentRecord.model_validate(row)
        except IntegrityError as exc:
            raise PersistenceError(f"Document metadata rejected: {exc.orig}") from exc
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceError(f"Failed to save document metadata: {exc}") from exc
        logger.info("Inserted document %s", record.id, extra={"document_id": record.id})
        return record

    async def list_all(self) -> list[DocumentRecord]:
        """All records, newest first."""
        try:
            async with self.db.session() as session:
                rows = await Repository(session, Document).list(
                    order_by=(Document.created_at.desc(), Document.id.desc()),
                )
                return [DocumentRecord.model_validate(r) for r in rows]
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceError(f"Failed to fetch documents: {exc}") from exc

    async def get(self, document_id: int) -> DocumentRecord:
        _require_valid_id(document_id)
        try:
            async with self.db.session() as session:
                row = await Repository(session, Document).get(document_id)
                record = DocumentRecord.model_validate(row) if row is not None else None
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceError(f"Failed to fetch document {document_id}: {exc}") from exc
        if record is None:
            raise NotFound("Document not found")
        return record

    async def delete(self, document_id: int) -> None:
        _require_valid_id(document_id)
        try:
            async with self.db.transaction() as session:
                removed = await Repository(session, Document).delete(document_id)
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceError(f"Failed to delete document {document_id}: {exc}") from exc
        if not removed:
            raise NotFound("Document not found")
        logger.info("Deleted document %s", document_id, extra={"document_id": document_id})
