from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class AppSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "Medical Document Portal"
    version: str = "0.1.0"

    model_config = SettingsConfigDict(
        env_prefix="APP_",            # APP_NAME, APP_VERSION
        extra="ignore",
    )


class PortalSettings(BaseSettings):
    """
    Document portal settings.

    Env support (PORTAL_* or .env):
      PORTAL_STORAGE_DIR, PORTAL_MAX_UPLOAD_BYTES, PORTAL_API_PREFIX,
      PORTAL_CORS_ORIGINS, PORTAL_AUTO_CREATE_SCHEMA, PORTAL_HOST,
      PORTAL_PORT, PORTAL_API_BASE
    """

    storage_dir: Path = Field(default=Path("uploads"))
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES, gt=0)
    api_prefix: str = Field(default="/api")
    cors_origins: str = Field(default="*")
    auto_create_schema: bool = Field(default=True)

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)

    # Where the client and CLI reach the API
    api_base: str = Field(default="http://localhost:5000/api")

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def storage_root(self) -> Path:
        return self.storage_dir.expanduser().resolve()


@lru_cache
def get_app_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so defaults in AppSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)


@lru_cache
def get_portal_settings(**kwargs) -> PortalSettings:
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return PortalSettings(**filtered_kwargs)
