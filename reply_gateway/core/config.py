import os
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

T = TypeVar("T")

_TRUTHY = {"1", "true", "t", "yes", "on"}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def _env(var_name: str, default: T, parse: Callable[[str], T] = str) -> Callable[[], T]:
    """
    Build a default factory reading ``var_name`` at settings construction.

    Unset variables and values ``parse`` rejects fall back to ``default``.
    """

    def factory() -> T:
        value = os.getenv(var_name)
        if value is None:
            return default
        try:
            return parse(value)
        except ValueError:
            return default

    return factory


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Reply Gateway")
    version: str = Field(default="0.1.0")
    environment: str = Field(default_factory=_env("APP_ENV", "local"))

    # Rendering
    renderer_backend: str = Field(
        default_factory=_env("RENDERER_BACKEND", "views"),
        description="Which renderer resolves view paths: 'views' or 'http'.",
    )
    views_path: str = Field(
        default_factory=_env("VIEWS_PATH", str(PROJECT_ROOT / "views.json")),
        description="JSON file with locale-keyed views for the views renderer.",
    )
    default_locale: str = Field(
        default_factory=_env("DEFAULT_LOCALE", "en-US"),
        description="Locale used when the event locale has no matching view.",
    )
    template_service_url: Optional[str] = Field(
        default_factory=_env("TEMPLATE_SERVICE_URL", None),
        description="Base URL of the template service used by the 'http' renderer.",
    )
    template_service_timeout: float = Field(
        default_factory=_env("TEMPLATE_SERVICE_TIMEOUT", 5.0, float),
        description="Timeout (seconds) for template service render calls.",
    )

    # Request context
    request_id_header: str = Field(
        default_factory=_env("REQUEST_ID_HEADER", "X-Request-ID"),
        description="HTTP header carrying correlation IDs.",
    )
    trust_client_ip_header: bool = Field(
        default_factory=_env("TRUST_CLIENT_IP_HEADER", False, _parse_bool),
        description="Read the client address from CLIENT_IP_HEADER (set behind a proxy).",
    )
    client_ip_header: str = Field(default_factory=_env("CLIENT_IP_HEADER", "X-Forwarded-For"))

    # Logging
    log_level: str = Field(default_factory=_env("LOG_LEVEL", "INFO"))
    log_json: bool = Field(
        default_factory=_env("LOG_JSON", False, _parse_bool),
        description="Emit one JSON object per log line instead of plain text.",
    )
    log_file_path: str = Field(
        default_factory=_env("LOG_FILE_PATH", str(PROJECT_ROOT / "logs" / "reply_gateway.log")),
        description="Rotating log file. An empty value disables file logging.",
    )
    log_file_max_bytes: int = Field(
        default_factory=_env("LOG_FILE_MAX_BYTES", 5 * 1024 * 1024, int)
    )
    log_file_backup_count: int = Field(default_factory=_env("LOG_FILE_BACKUP_COUNT", 5, int))


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


settings = get_settings()
