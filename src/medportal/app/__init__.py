from .env import Env, get_env, is_prod, pick
from .logging import JsonFormatter, setup_logging
from .settings import (
    MAX_UPLOAD_BYTES,
    AppSettings,
    PortalSettings,
    get_app_settings,
    get_portal_settings,
)

__all__ = [
    "Env",
    "get_env",
    "is_prod",
    "pick",
    "JsonFormatter",
    "setup_logging",
    "MAX_UPLOAD_BYTES",
    "AppSettings",
    "PortalSettings",
    "get_app_settings",
    "get_portal_settings",
]
