"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import ipaddress
import logging
import ssl
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from casedocs.exceptions import SettingsError
from casedocs.typing.enums import RecognizerBackendType

try:
    import httpx
except Exception:  # pragma: no cover - optional dependency at runtime
    httpx: Any
    httpx = None

try:
    import certifi
except Exception:  # pragma: no cover - optional dependency at runtime
    certifi: Any
    certifi = None

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "casedocs"
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
        description="Path to a CA bundle. Falls back to certifi.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="HTTP request timeout in seconds.",
    )
    max_connections: int = Field(
        default=20,
        validation_alias="MAX_CONNECTIONS",
        description="Maximum number of concurrent connections.",
    )

    openai_base_url: str | None = Field(
        default=None,
        validation_alias="OPENAI_BASE_URL",
        description="Base URL for an OpenAI-compatible API.",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
        description="API key for the OpenAI-compatible API.",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="OPENAI_MODEL",
        description="Default model for generative calls.",
    )

    ocr_backend: RecognizerBackendType = Field(
        default=RecognizerBackendType.TESSERACT,
        validation_alias="OCR_BACKEND",
        description="Primary text recognizer: 'tesseract' or 'vision_llm'.",
    )
    ocr_language: str = Field(
        default="eng",
        validation_alias="OCR_LANGUAGE",
        description="Tesseract language pack(s), e.g. 'eng+fra'.",
    )
    ocr_preprocess: bool = Field(
        default=True,
        validation_alias="OCR_PREPROCESS",
        description="Run the image normalizer before recognition.",
    )
    ocr_timeout: float = Field(
        default=60.0,
        validation_alias="OCR_TIMEOUT",
        description="Per-page recognition timeout in seconds.",
    )
    ocr_vision_model: str | None = Field(
        default=None,
        validation_alias="OCR_VISION_MODEL",
        description="Vision model used by the remote recognizer. Defaults to OPENAI_MODEL.",
    )
    pdf_render_dpi: int = Field(
        default=200,
        validation_alias="PDF_RENDER_DPI",
        description="DPI used when rasterising scanned PDF pages.",
    )

    generative_classification: bool = Field(
        default=True,
        validation_alias="GENERATIVE_CLASSIFICATION",
        description="Try the generative classifier before keywords when a key is configured.",
    )
    classification_model: str | None = Field(
        default=None,
        validation_alias="CLASSIFICATION_MODEL",
        description="Model used for classification. Defaults to OPENAI_MODEL.",
    )
    classification_timeout: float = Field(
        default=20.0,
        validation_alias="CLASSIFICATION_TIMEOUT",
        description="Generative classification timeout in seconds.",
    )

    low_confidence_threshold: float = Field(
        default=70.0,
        validation_alias="LOW_CONFIDENCE_THRESHOLD",
        description="Extraction confidence below which validation emits a warning.",
    )

    storage_root: str = Field(
        default="data/storage",
        validation_alias="STORAGE_ROOT",
        description="Root directory of the local blob storage.",
    )
    template_store_dir: str = Field(
        default="data/templates",
        validation_alias="TEMPLATE_STORE_DIR",
        description="Directory holding form template envelopes.",
    )
    submission_store_dir: str = Field(
        default="data/submissions",
        validation_alias="SUBMISSION_STORE_DIR",
        description="Directory holding form submissions and signatures.",
    )
    _httpx_client: object | None = PrivateAttr(default=None)

    @field_validator("openai_base_url")
    @classmethod
    def _require_https_outside_localhost(cls, value: str | None) -> str | None:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme == "https":
            return value
        host = (parsed.hostname or "").strip("[]").lower()
        if parsed.scheme == "http" and host in _LOCAL_HOSTS:
            return value
        message = f"OPENAI_BASE_URL must use https outside local development: {value}"
        raise ValueError(message)

    @property
    def generative_backend_configured(self) -> bool:
        """Return whether the generative classifier may be attempted."""
        return bool(self.openai_api_key) and self.generative_classification

    @property
    def effective_classification_model(self) -> str:
        """Return the model used for classification calls."""
        return self.classification_model or self.openai_model

    @property
    def effective_vision_model(self) -> str:
        """Return the model used by the remote recognizer."""
        return self.ocr_vision_model or self.openai_model

    def httpx_client(self) -> object | None:
        """Return the lazily created sync HTTPX client shared by remote backends."""
        if httpx is None:
            return None
        if self._httpx_client is None:
            limits = httpx.Limits(max_connections=self.max_connections)
            self._httpx_client = httpx.Client(**build_httpx_client_kwargs(self), limits=limits)
        return self._httpx_client

    def close_httpx_client(self) -> None:
        """Close the cached HTTPX client if one was created."""
        client = self._httpx_client
        self._httpx_client = None
        close = getattr(client, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception:
            logger.warning("Failed to close HTTPX client")


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    cafile = settings.cert_path
    if cafile is None and certifi is not None:
        cafile = certifi.where()
    ssl_context = ssl.create_default_context(cafile=cafile)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def _is_local_target(target_url: str | None) -> bool:
    if not target_url:
        return False
    host = (urlparse(target_url).hostname or "").strip("[]").lower()
    if host in _LOCAL_HOSTS:
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def build_httpx_client_kwargs(settings: Settings) -> dict[str, Any]:
    """Build kwargs used for `httpx.Client`.

    Local targets never go through the proxy.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        dict[str, Any]: Arguments for the client constructor.
    """
    proxy_url = settings.https_proxy or settings.http_proxy

    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
    }
    if proxy_url and not _is_local_target(settings.openai_base_url):
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
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
