from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app.env import get_env
from ..app.settings import AppSettings, PortalSettings, get_app_settings, get_portal_settings
from ..db.engine import DBEngine
from ..db.settings import DBSettings, get_db_settings
from ..documents.metadata import MetadataStore
from ..documents.router import router as documents_router
from ..documents.service import DocumentService
from ..storage.local import LocalBlobStore
from . import health
from .errors import register_error_handlers
from .middleware import MULTIPART_OVERHEAD, CatchAllExceptionMiddleware, RequestSizeLimitMiddleware

logger = logging.getLogger(__name__)


def build_service(settings: PortalSettings, engine: DBEngine) -> DocumentService:
    return DocumentService(
        MetadataStore(engine),
        LocalBlobStore(settings.storage_root),
        max_upload_bytes=settings.max_upload_bytes,
    )


def create_app(
    portal_settings: PortalSettings | None = None,
    db_settings: DBSettings | None = None,
    app_settings: AppSettings | None = None,
    *,
    service: DocumentService | None = None,
) -> FastAPI:
    """Build the portal's ASGI app.

    The engine and the document service are created eagerly and stored on
    ``app.state``; the lifespan only prepares the schema and storage
    directory and disposes the engine it owns.
    """
    portal_settings = portal_settings or get_portal_settings()
    app_settings = app_settings or get_app_settings()

    owns_engine = service is None
    if service is None:
        engine = DBEngine(db_settings or get_db_settings())
        service = build_service(portal_settings, engine)
    else:
        engine = service.metadata.db

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        service.blobs.ensure_root()
        if portal_settings.auto_create_schema:
            await engine.create_all()
        url = engine.engine.url
        logger.info(
            "DB attached: url=%s storage=%s",
            url.render_as_string(hide_password=True),
            service.blobs.root,
        )
        try:
            yield
        finally:
            if owns_engine:
                await engine.dispose()

    app = FastAPI(
        title=app_settings.name,
        version=app_settings.version,
        lifespan=lifespan,
    )
    app.state.db_engine = engine
    app.state.document_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=portal_settings.cors_origins_list,
        allow_credentials=portal_settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=portal_settings.max_upload_bytes + MULTIPART_OVERHEAD,
    )
    # Error handling
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(documents_router, prefix=portal_settings.api_prefix.rstrip("/"))

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": f"{app_settings.name} API is working",
            "version": app_settings.version,
            "documents": f"{portal_settings.api_prefix.rstrip('/')}/documents",
        }

    logger.info(f"{app_settings.version} version of {app_settings.name} initialized [env: {get_env()}]")
    return app


__all__ = ["create_app", "build_service"]
