"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import ssl
from functools import lru_cache
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formschema.exceptions import SettingsError

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "formschema"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY", description="HTTP proxy URL.")
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="HTTPS proxy URL.",
    )
    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="Path to SSL certificate bundle.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="Generator request timeout in seconds.",
    )

    openai_base_url: str | None = Field(
        default=None,
        validation_alias="OPENAI_BASE_URL",
        description="Base URL for the OpenAI-compatible endpoint.",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
        description="API key for the OpenAI-compatible endpoint.",
    )
    openai_model: str = Field(
        default="gpt-5-nano",
        validation_alias="OPENAI_MODEL",
        description="Model used to generate field attributes.",
    )
    openai_max_completion_tokens: int = Field(
        default=10000,
        ge=1,
        validation_alias="OPENAI_MAX_COMPLETION_TOKENS",
        description="Completion token ceiling for one generation call.",
    )

    audit_log_path: str = Field(
        default="logs/ai-requests.jsonl",
        validation_alias="AUDIT_LOG_PATH",
        description="JSON-lines file receiving one audit record per generation call.",
    )
    export_dir: str = Field(
        default="results",
        validation_alias="EXPORT_DIR",
        description="Directory receiving exported schema files.",
    )

    @field_validator("openai_base_url")
    @classmethod
    def _validate_openai_base_url(cls, value: str | None) -> str | None:
        """Reject clear-text endpoints outside local development.

        Args:
            value (str | None): Configured base URL.

        Raises:
            ValueError: If the URL uses plain http against a remote host.

        Returns:
            str | None: Validated base URL.
        """
        if not value:
            return value
        parsed = urlparse(value)
        if parsed.scheme == "http" and (parsed.hostname or "") not in _LOCAL_HOSTS:
            raise ValueError("OPENAI_BASE_URL must use https outside local development")  # noqa: TRY003
        return value


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def build_httpx_client_kwargs(settings: Settings) -> dict[str, Any]:
    """Build kwargs used for `httpx.AsyncClient`.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Arguments for the client constructor.
    """
    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
    }
    proxy_url = settings.https_proxy or settings.http_proxy
    if proxy_url:
        kwargs["proxy"] = proxy_url
    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise SettingsError(exc=exc) from exc
