"""httpx client for the document portal API."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import httpx

from ..documents.schemas import DocumentListResponse, DocumentRecord
from ..documents.service import PDF_MEDIA_TYPE

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)

_FILENAME_STAR = re.compile(r"filename\*=(?:utf-8|UTF-8)''([^;]+)")
_FILENAME = re.compile(r'filename="([^"]*)"')


class ClientError(Exception):
    """A failed API call, carrying the message the server reported."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or f"HTTP {response.status_code}"


def filename_from_disposition(header: str | None) -> str | None:
    if not header:
        return None
    m = _FILENAME_STAR.search(header)
    if m:
        return unquote(m.group(1))
    m = _FILENAME.search(header)
    return m.group(1) if m else None


class DocumentClient:
    """Calls the four document operations over HTTP.

    ``base_url`` points at the API prefix, e.g. ``http://localhost:5000/api``.
    An existing ``httpx.Client`` (or Starlette ``TestClient``) can be passed
    instead; paths are then resolved against ``base_url`` as a prefix.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000/api",
        *,
        http: httpx.Client | None = None,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.Client(timeout=timeout)

    def __enter__(self) -> "DocumentClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/documents{path}"

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path or "/documents", exc)
            raise ClientError(f"Could not reach the document service: {exc}") from exc
        if response.is_error:
            raise ClientError(_error_message(response), response.status_code)
        return response

    def upload_bytes(self, data: bytes, filename: str, content_type: str = PDF_MEDIA_TYPE) -> DocumentRecord:
        response = self._request("POST", "", files={"file": (filename, data, content_type)})
        return DocumentRecord.model_validate(response.json())

    def upload_file(self, path: str | Path, content_type: str = PDF_MEDIA_TYPE) -> DocumentRecord:
        path = Path(path)
        return self.upload_bytes(path.read_bytes(), path.name, content_type)

    def list_documents(self) -> list[DocumentRecord]:
        response = self._request("GET", "")
        return DocumentListResponse.model_validate(response.json()).documents

    def download(self, document_id: int) -> tuple[bytes, str | None]:
        """Return the stored bytes and the filename from Content-Disposition."""
        response = self._request("GET", f"/{document_id}")
        return response.content, filename_from_disposition(response.headers.get("content-disposition"))

    def delete(self, document_id: int) -> str:
        response = self._request("DELETE", f"/{document_id}")
        return response.json().get("message", "")
