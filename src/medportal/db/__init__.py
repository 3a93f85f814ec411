# Public DB API exports
from .settings import DBSettings, get_db_settings
from .engine import DBEngine
from .base import Base, CreatedAtMixin
from .repository import Repository
from .health import db_healthcheck

__all__ = [
    "DBSettings",
    "get_db_settings",
    "DBEngine",
    "Base",
    "CreatedAtMixin",
    "Repository",
    "db_healthcheck",
]
