"""ASGI entry point: ``uvicorn medportal.api.main:app``."""

from . import create_app

app = create_app()
