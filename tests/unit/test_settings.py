from __future__ import annotations

import ssl
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from casedocs.exceptions import SettingsError
from casedocs.settings import (
    Settings,
    build_httpx_client_kwargs,
    build_ssl_context,
    ensure_env_file_exists,
    get_settings,
)
from casedocs.typing.enums import RecognizerBackendType

if TYPE_CHECKING:
    from pathlib import Path


def test_settings_load_from_env_file(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_payload = (
        "APP_ENV=test\n"
        "LOG_LEVEL=DEBUG\n"
        "LOG_JSON=false\n"
        "TIMEOUT=12\n"
        "OCR_BACKEND=vision_llm\n"
        "OCR_LANGUAGE=eng+fra\n"
        "LOW_CONFIDENCE_THRESHOLD=55\n"
    )
    env_file.write_text(env_payload, encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    settings = Settings()

    assert settings.app_env == "test"
    assert settings.log_level == "DEBUG"
    assert settings.log_json is False
    assert settings.timeout == 12
    assert settings.ocr_backend == RecognizerBackendType.VISION_LLM
    assert settings.ocr_language == "eng+fra"
    assert settings.low_confidence_threshold == 55


def test_settings_defaults() -> None:
    settings = Settings(openai_api_key=None)

    assert settings.ocr_backend == RecognizerBackendType.TESSERACT
    assert settings.low_confidence_threshold == 70
    assert settings.ocr_preprocess is True
    assert settings.generative_backend_configured is False


def test_settings_rejects_plain_http_openai_base_url_outside_localhost(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_BASE_URL", "http://api.example.com/v1")
    with pytest.raises(ValidationError, match="must use https outside local development"):
        Settings()


def test_settings_allows_plain_http_openai_base_url_for_localhost(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost:4000/v1")
    settings = Settings()
    assert settings.openai_base_url == "http://localhost:4000/v1"


def test_generative_backend_requires_key_and_flag() -> None:
    assert Settings(openai_api_key="sk-test").generative_backend_configured is True
    assert (
        Settings(openai_api_key="sk-test", generative_classification=False).generative_backend_configured
        is False
    )


def test_effective_models_fall_back_to_openai_model() -> None:
    settings = Settings(openai_model="base-model")
    assert settings.effective_classification_model == "base-model"
    assert settings.effective_vision_model == "base-model"

    tuned = Settings(openai_model="base-model", classification_model="cls", ocr_vision_model="vision")
    assert tuned.effective_classification_model == "cls"
    assert tuned.effective_vision_model == "vision"


def test_build_ssl_context_is_strict() -> None:
    context = build_ssl_context(Settings())
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.minimum_version == ssl.TLSVersion.TLSv1_2


def test_httpx_kwargs_skip_proxy_for_local_base_url() -> None:
    remote = build_httpx_client_kwargs(
        Settings(https_proxy="http://proxy:3128", openai_base_url="https://api.example.com/v1"),
    )
    local = build_httpx_client_kwargs(
        Settings(https_proxy="http://proxy:3128", openai_base_url="http://127.0.0.1:8000/v1"),
    )

    assert remote["proxy"] == "http://proxy:3128"
    assert "proxy" not in local
    assert local["timeout"] == 30


def test_httpx_client_is_cached_and_closed() -> None:
    settings = Settings()
    client = settings.httpx_client()
    assert client is settings.httpx_client()

    settings.close_httpx_client()
    assert settings.httpx_client() is not client
    settings.close_httpx_client()


def test_get_settings_uses_environment(monkeypatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("APP_ENV", "ci")

    settings = get_settings()
    assert settings.app_env == "ci"

    get_settings.cache_clear()


def test_get_settings_retries_after_env_template_on_missing(monkeypatch) -> None:
    get_settings.cache_clear()

    attempts = {"count": 0}

    class _DummySettings:
        app_env = "ci"

    def _fake_settings():
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise ValueError("missing")
        return _DummySettings()

    copied = {"done": 0}

    def _mark_env_copied(**kwargs: object) -> None:
        _ = kwargs
        copied["done"] += 1

    monkeypatch.setattr("casedocs.settings.Settings", _fake_settings)
    monkeypatch.setattr("casedocs.settings._is_missing_settings_error", lambda exc: True)
    monkeypatch.setattr("casedocs.settings.ensure_env_file_exists", _mark_env_copied)

    settings = get_settings()
    assert copied["done"] == 1
    assert attempts["count"] == 2
    assert settings.app_env == "ci"

    get_settings.cache_clear()


def test_get_settings_wraps_other_errors(monkeypatch) -> None:
    get_settings.cache_clear()

    def _fake_settings():
        raise ValueError("boom")

    monkeypatch.setattr("casedocs.settings.Settings", _fake_settings)

    with pytest.raises(SettingsError, match="boom"):
        get_settings()

    get_settings.cache_clear()


def test_ensure_env_file_exists_copies_template(tmp_path: Path) -> None:
    template = tmp_path / ".env.template"
    template.write_text("APP_ENV=dev\n", encoding="utf-8")
    env_path = tmp_path / ".env"

    ensure_env_file_exists(env_path=env_path, template_path=template)
    assert env_path.read_text(encoding="utf-8") == "APP_ENV=dev\n"

    env_path.write_text("APP_ENV=prod\n", encoding="utf-8")
    ensure_env_file_exists(env_path=env_path, template_path=template)
    assert env_path.read_text(encoding="utf-8") == "APP_ENV=prod\n"
