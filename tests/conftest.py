"""
Root conftest.py for medportal tests.

Fixtures build the real stack against an in-memory SQLite database and a
temporary storage directory:

- ``engine`` / ``metadata`` / ``blobs`` / ``service``: the stores and the
  document service, created inside the test's event loop
- ``app`` / ``client``: FastAPI app wired to ``service``, driven through
  httpx ``ASGITransport`` (no lifespan)
- ``portal_app`` / ``portal_client``: app that owns its engine, driven
  through Starlette's ``TestClient`` so the lifespan creates the schema
"""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from medportal.api import create_app
from medportal.app.settings import AppSettings, PortalSettings
from medportal.client.http import DocumentClient
from medportal.db.engine import DBEngine
from medportal.db.settings import DBSettings
from medportal.documents.metadata import MetadataStore
from medportal.documents.service import DocumentService
from medportal.storage.local import LocalBlobStore

MEMORY_URL = "sqlite+aiosqlite:///:memory:"

# Smallest byte string that passes for a PDF in these tests (10 bytes)
PDF_BYTES = b"%PDF-1.4\n\n"


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    # Ensure custom markers are registered even if pyproject.toml isn't picked up
    for name, desc in [
        ("acceptance", "End-to-end tests through the HTTP API"),
        ("storage", "Blob store tests touching the filesystem"),
        ("client", "Client workspace, intake PDF and CLI tests"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# STORES AND SERVICE
# =============================================================================


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def blobs(storage_dir: Path) -> LocalBlobStore:
    return LocalBlobStore(storage_dir)


@pytest_asyncio.fixture
async def engine():
    db = DBEngine(DBSettings(database_url=MEMORY_URL))
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def metadata(engine: DBEngine) -> MetadataStore:
    return MetadataStore(engine)


@pytest.fixture
def service(metadata: MetadataStore, blobs: LocalBlobStore) -> DocumentService:
    return DocumentService(metadata, blobs)


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def portal_settings(storage_dir: Path) -> PortalSettings:
    return PortalSettings(storage_dir=storage_dir, cors_origins="*")


@pytest.fixture
def app(portal_settings: PortalSettings, service: DocumentService):
    return create_app(portal_settings, app_settings=AppSettings(), service=service)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def portal_app(portal_settings: PortalSettings):
    return create_app(
        portal_settings,
        DBSettings(database_url=MEMORY_URL),
        AppSettings(),
    )


@pytest.fixture
def portal_client(portal_app):
    """DocumentClient talking to a live app through Starlette's TestClient."""
    with TestClient(portal_app) as tc:
        yield DocumentClient("http://testserver/api", http=tc)


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES
