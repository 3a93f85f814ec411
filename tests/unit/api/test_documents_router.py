"""HTTP contract of the documents routes, driven through ASGITransport."""

from __future__ import annotations

from io import BytesIO

import pytest
from httpx import AsyncClient

from medportal.documents.router import content_disposition


def _pdf(name: str = "a.pdf", data: bytes = b"%PDF-1.4\n\n", content_type: str = "application/pdf"):
    return {"file": (name, BytesIO(data), content_type)}


@pytest.mark.asyncio
async def test_upload_returns_created_record(client: AsyncClient):
    resp = await client.post("/api/documents", files=_pdf())

    assert resp.status_code == 201
    body = resp.json()
    assert body["original_filename"] == "a.pdf"
    assert body["size_bytes"] == 10
    assert body["storage_path"].endswith("-a.pdf")
    assert isinstance(body["id"], int)
    assert "created_at" in body


@pytest.mark.asyncio
async def test_upload_alias_path(client: AsyncClient):
    resp = await client.post("/api/documents/upload", files=_pdf("legacy.pdf"))

    assert resp.status_code == 201
    assert resp.json()["original_filename"] == "legacy.pdf"


@pytest.mark.asyncio
async def test_upload_rejects_non_pdf(client: AsyncClient, blobs):
    resp = await client.post("/api/documents", files=_pdf("notes.txt", b"hello", "text/plain"))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Only PDF files are allowed", "code": "validation_error"}
    assert list(blobs.iter_keys()) == []


@pytest.mark.asyncio
async def test_upload_without_file(client: AsyncClient):
    resp = await client.post("/api/documents", data={"note": "no file here"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file uploaded", "code": "validation_error"}


@pytest.mark.asyncio
async def test_list_is_wrapped_and_newest_first(client: AsyncClient):
    assert (await client.get("/api/documents")).json() == {"documents": []}

    first = (await client.post("/api/documents", files=_pdf("first.pdf"))).json()
    second = (await client.post("/api/documents", files=_pdf("second.pdf"))).json()

    resp = await client.get("/api/documents")

    assert resp.status_code == 200
    assert [d["id"] for d in resp.json()["documents"]] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_download_returns_bytes_and_filename(client: AsyncClient):
    data = b"%PDF-1.7 body bytes"
    created = (await client.post("/api/documents", files=_pdf("report.pdf", data))).json()

    resp = await client.get(f"/api/documents/{created['id']}")

    assert resp.status_code == 200
    assert resp.content == data
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == 'attachment; filename="report.pdf"'


@pytest.mark.asyncio
async def test_download_unknown_id(client: AsyncClient):
    resp = await client.get("/api/documents/999")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Document not found", "code": "not_found"}


@pytest.mark.asyncio
async def test_id_beyond_64_bits_is_not_found(client: AsyncClient):
    huge = 2**64

    for resp in (await client.get(f"/api/documents/{huge}"), await client.delete(f"/api/documents/{huge}")):
        assert resp.status_code == 404
        assert resp.json() == {"error": "Document not found", "code": "not_found"}


@pytest.mark.asyncio
async def test_download_with_missing_blob(client: AsyncClient, blobs):
    created = (await client.post("/api/documents", files=_pdf())).json()
    (blobs.root / created["storage_path"]).unlink()

    resp = await client.get(f"/api/documents/{created['id']}")

    assert resp.status_code == 404
    assert resp.json()["error"] == "File not found on server"


@pytest.mark.asyncio
async def test_delete_then_gone(client: AsyncClient, blobs):
    created = (await client.post("/api/documents", files=_pdf())).json()

    resp = await client.delete(f"/api/documents/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Document deleted successfully"}
    assert list(blobs.iter_keys()) == []

    again = await client.delete(f"/api/documents/{created['id']}")
    assert again.status_code == 404
    assert (await client.get(f"/api/documents/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_non_integer_id_is_rejected(client: AsyncClient):
    resp = await client.get("/api/documents/abc")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_declared_oversize_body_gets_413(client: AsyncClient):
    resp = await client.post(
        "/api/documents",
        content=b"x",
        headers={"content-length": str(60 * 1024 * 1024), "content-type": "application/pdf"},
    )

    assert resp.status_code == 413
    assert resp.json()["code"] == "payload_too_large"


@pytest.mark.asyncio
async def test_service_root_and_health(client: AsyncClient):
    root = await client.get("/")
    assert root.status_code == 200
    assert root.json()["documents"] == "/api/documents"

    health = await client.get("/health")
    assert health.json() == {"status": "ok", "version": "0.1.0"}

    assert (await client.get("/_db/health")).status_code == 200


@pytest.mark.asyncio
async def test_cors_exposes_content_disposition(client: AsyncClient):
    resp = await client.get("/api/documents", headers={"Origin": "http://localhost:3000"})

    assert resp.headers["access-control-allow-origin"] == "*"
    assert "content-disposition" in resp.headers["access-control-expose-headers"].lower()


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("report.pdf", 'attachment; filename="report.pdf"'),
        ("Befund ü.pdf", "attachment; filename*=utf-8''Befund%20%C3%BC.pdf"),
        ('quote".pdf', "attachment; filename*=utf-8''quote%22.pdf"),
    ],
)
def test_content_disposition(filename, expected):
    assert content_disposition(filename) == expected
