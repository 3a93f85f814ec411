"""User-facing document workspace.

Wraps :class:`DocumentClient` the way the portal UI uses it: every action
leaves a transient success/error message instead of raising, and the
document list is refreshed after anything that changes it.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from ..documents.schemas import DocumentRecord
from ..exceptions import ValidationError
from .http import ClientError, DocumentClient
from .intake import PatientIntakeForm, intake_filename, render_intake_pdf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkspaceMessage:
    kind: Literal["success", "error"]
    text: str


def format_file_size(size: Optional[int]) -> str:
    if size is None or size < 0:
        return "-"
    if size == 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(size)
    idx = 0
    while value >= 1024 and idx < len(units) - 1:
        value /= 1024
        idx += 1
    return f"{round(value, 2):g} {units[idx]}"


class DocumentWorkspace:
    def __init__(self, client: DocumentClient):
        self.client = client
        self.documents: list[DocumentRecord] = []
        self.message: Optional[WorkspaceMessage] = None

    def _ok(self, text: str) -> WorkspaceMessage:
        self.message = WorkspaceMessage("success", text)
        return self.message

    def _fail(self, text: str) -> WorkspaceMessage:
        self.message = WorkspaceMessage("error", text)
        return self.message

    def clear_message(self) -> None:
        self.message = None

    def refresh(self) -> WorkspaceMessage | None:
        try:
            self.documents = self.client.list_documents()
        except ClientError as exc:
            logger.warning("Fetching documents failed: %s", exc.message)
            return self._fail(exc.message or "Failed to fetch documents")
        return None

    def upload_file(self, path: str | Path) -> WorkspaceMessage:
        path = Path(path)
        if path.suffix.lower() != ".pdf":
            return self._fail("Please select a PDF file")
        try:
            self.client.upload_file(path)
        except (ClientError, OSError) as exc:
            return self._fail(getattr(exc, "message", None) or f"Failed to upload file: {exc}")
        self.refresh()
        return self._ok("File uploaded successfully")

    def generate_and_upload(self, form: PatientIntakeForm, *, now: dt.datetime | None = None) -> WorkspaceMessage:
        try:
            form.validate_for_submission()
        except ValidationError as exc:
            return self._fail(exc.message)

        now = now or dt.datetime.now()
        pdf = render_intake_pdf(form, generated_at=now)
        filename = intake_filename(form, int(now.timestamp() * 1000))
        try:
            self.client.upload_bytes(pdf, filename)
        except ClientError as exc:
            return self._fail(exc.message or "Failed to upload generated document")
        self.refresh()
        return self._ok("Document generated and uploaded successfully")

    def download(self, document_id: int, dest_dir: str | Path = ".") -> WorkspaceMessage:
        try:
            content, filename = self.client.download(document_id)
        except ClientError as exc:
            return self._fail(exc.message or "Failed to download document")
        name = Path(filename or f"document_{document_id}.pdf").name
        target = Path(dest_dir) / name
        try:
            target.write_bytes(content)
        except OSError as exc:
            return self._fail(f"Failed to save {name}: {exc}")
        return self._ok(f"Downloaded {name}")

    def delete(self, document_id: int) -> WorkspaceMessage:
        try:
            self.client.delete(document_id)
        except ClientError as exc:
            return self._fail(exc.message or "Failed to delete document")
        self.refresh()
        return self._ok("Document deleted successfully")
