from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..exceptions import MedPortalError

logger = logging.getLogger(__name__)


async def medportal_error_handler(request: Request, exc: MedPortalError) -> JSONResponse:
    status = exc.status_code
    extra = {"http_method": request.method, "path": request.url.path, "status_code": status}
    if status >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path} ({status}): {exc}", exc_info=exc, extra=extra)
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path} ({status}): {exc}", extra=extra)
    return JSONResponse(status_code=status, content={"error": exc.message, "code": exc.code})


def register_error_handlers(app: FastAPI) -> None:
    """Map the portal's error kinds onto structured JSON responses."""
    app.add_exception_handler(MedPortalError, medportal_error_handler)  # type: ignore[arg-type]
