from __future__ import annotations

from types import SimpleNamespace

import pytest

from casedocs.backends import openai_chat
from casedocs.backends.openai_chat import create_chat_completion, parse_json_object
from casedocs.exceptions import BackendError
from casedocs.settings import Settings


class _FakeHttpClient:
    pass


class _FakeStatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"status {status_code}")
        self.status_code = status_code


class _FakeTimeoutError(Exception):
    pass


class _FakeCompletion:
    def __init__(self, payload: dict) -> None:
        self._payload = payload

    def model_dump(self, *, mode: str = "json") -> dict:
        assert mode == "json"
        return self._payload


def _fake_sdk(*, answer: dict | None = None, error: Exception | None = None, seen: dict | None = None):
    seen = seen if seen is not None else {}

    class _Completions:
        def create(self, **payload: object) -> _FakeCompletion:
            seen["payload"] = payload
            if error is not None:
                raise error
            return _FakeCompletion(answer or {})

    class _Client:
        chat = SimpleNamespace(completions=_Completions())

    def _openai(**kwargs: object) -> _Client:
        seen["client_kwargs"] = kwargs
        return _Client()

    return SimpleNamespace(
        OpenAI=_openai,
        APIStatusError=_FakeStatusError,
        APITimeoutError=_FakeTimeoutError,
        APIConnectionError=ConnectionError,
    )


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setattr(Settings, "httpx_client", lambda _self: _FakeHttpClient())
    return Settings(
        _env_file=None,
        openai_api_key="test-api-key",  # pragma: allowlist secret
        openai_base_url="https://llm.local/v1",
        timeout=7,
    )


def test_requires_api_key() -> None:
    with pytest.raises(BackendError, match="OPENAI_API_KEY"):
        create_chat_completion(Settings(_env_file=None, openai_api_key=None), {})


def test_requires_openai_package(monkeypatch: pytest.MonkeyPatch, settings: Settings) -> None:
    monkeypatch.setattr(openai_chat, "openai_sdk", None)

    with pytest.raises(BackendError, match="openai is required"):
        create_chat_completion(settings, {})


def test_returns_first_choice_content(monkeypatch: pytest.MonkeyPatch, settings: Settings) -> None:
    seen: dict = {}
    answer = {"choices": [{"message": {"content": '{"ok": true}'}}]}
    monkeypatch.setattr(openai_chat, "openai_sdk", _fake_sdk(answer=answer, seen=seen))

    content = create_chat_completion(settings, {"model": "x"}, timeout=3)

    assert content == '{"ok": true}'
    assert seen["payload"] == {"model": "x", "timeout": 3}
    assert seen["client_kwargs"]["api_key"] == "test-api-key"  # pragma: allowlist secret
    assert seen["client_kwargs"]["base_url"] == "https://llm.local/v1"
    assert seen["client_kwargs"]["max_retries"] == 0
    assert isinstance(seen["client_kwargs"]["http_client"], _FakeHttpClient)


def test_default_timeout_comes_from_settings(monkeypatch: pytest.MonkeyPatch, settings: Settings) -> None:
    seen: dict = {}
    answer = {"choices": [{"message": {"content": "x"}}]}
    monkeypatch.setattr(openai_chat, "openai_sdk", _fake_sdk(answer=answer, seen=seen))

    create_chat_completion(settings, {})

    assert seen["payload"]["timeout"] == 7


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (_FakeStatusError(503), "failed with status 503"),
        (_FakeTimeoutError("slow"), "timed out"),
        (ConnectionError("refused"), "request failed: refused"),
        (RuntimeError("boom"), "request failed: boom"),
    ],
)
def test_sdk_errors_become_backend_errors(
    monkeypatch: pytest.MonkeyPatch,
    settings: Settings,
    error: Exception,
    message: str,
) -> None:
    monkeypatch.setattr(openai_chat, "openai_sdk", _fake_sdk(error=error))

    with pytest.raises(BackendError, match=message):
        create_chat_completion(settings, {})


@pytest.mark.parametrize(
    ("answer", "message"),
    [
        ({"choices": []}, "no choices"),
        ({"choices": [{"message": {"content": ""}}]}, "empty content"),
    ],
)
def test_unusable_answers(
    monkeypatch: pytest.MonkeyPatch,
    settings: Settings,
    answer: dict,
    message: str,
) -> None:
    monkeypatch.setattr(openai_chat, "openai_sdk", _fake_sdk(answer=answer))

    with pytest.raises(BackendError, match=message):
        create_chat_completion(settings, {})


def test_parse_json_object() -> None:
    assert parse_json_object('{"a": 1}') == {"a": 1}

    with pytest.raises(BackendError, match="invalid JSON"):
        parse_json_object("{oops")
    with pytest.raises(BackendError, match="must be a JSON object"):
        parse_json_object("[1, 2]")
