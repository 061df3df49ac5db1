from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl, Field

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]

DEFAULT_FEATURED_TOOLS = [
    "ai-story-generator",
    "story-generator",
    "ai-content-improver",
    "code-beautifier",
    "meta-tag-generator",
    "image-compressor",
]

CATALOG_MODES = ("merge", "dynamic")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="allow",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Backend ---
    backend_url: AnyHttpUrl = Field(default="http://127.0.0.1:8000", validation_alias="BACKEND_URL")
    backend_api_prefix: str = Field(default="/api/v1", validation_alias="BACKEND_API_PREFIX")
    request_timeout: float = Field(default=30.0, validation_alias="REQUEST_TIMEOUT")

    # --- Relay (used by clients that go through this service) ---
    relay_url: AnyHttpUrl = Field(default="http://127.0.0.1:3000", validation_alias="RELAY_URL")

    # --- CORS ---
    cors_allowed_origins: str = Field(default=",".join(DEFAULT_ALLOWED_ORIGINS), validation_alias="CORS_ALLOWED_ORIGINS")

    # --- Catalog ---
    featured_tools: str = Field(default=",".join(DEFAULT_FEATURED_TOOLS), validation_alias="FEATURED_TOOLS")
    catalog_mode: str = Field(default="merge", validation_alias="CATALOG_MODE")
    catalog_refresh_interval: float = Field(default=60.0, validation_alias="CATALOG_REFRESH_INTERVAL")

    # --- Logging ---
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def backend_base(self) -> str:
        return str(self.backend_url).rstrip("/")

    @property
    def relay_base(self) -> str:
        return str(self.relay_url).rstrip("/")

    @property
    def api_prefix(self) -> str:
        prefix = self.backend_api_prefix.strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = "/" + prefix
        return prefix

    @property
    def featured_ids(self) -> List[str]:
        return [item.strip() for item in self.featured_tools.split(",") if item.strip()]

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
