"""OpenAI-compatible chat completion calls shared by the remote backends."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

try:
    import openai as openai_sdk
except Exception:  # pragma: no cover - optional dependency at runtime
    openai_sdk: Any
    openai_sdk = None

from casedocs.exceptions import BackendError

if TYPE_CHECKING:
    from casedocs.settings import Settings


def create_chat_completion(
    settings: Settings,
    payload: dict[str, Any],
    *,
    timeout: float | None = None,
) -> str:
    """Send one chat completion request and return the message content.

    Args:
        settings (Settings): Runtime settings.
        payload (dict[str, Any]): Request payload.
        timeout (float | None): Per-request timeout in seconds.

    Raises:
        BackendError: If the backend is not configured, the request fails or the
            answer carries no content.

    Returns:
        str: Content of the first choice.
    """
    if not settings.openai_api_key:
        raise BackendError(message="OPENAI_API_KEY is required for remote backends")
    if openai_sdk is None:
        raise BackendError(message="openai is required for remote backends")

    openai_client = openai_sdk.OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        http_client=settings.httpx_client(),
        max_retries=0,
    )

    try:
        completion = openai_client.chat.completions.create(**payload, timeout=timeout or settings.timeout)
        data = completion.model_dump(mode="json")
    except Exception as exc:
        status_error_type = getattr(openai_sdk, "APIStatusError", None)
        timeout_error_type = getattr(openai_sdk, "APITimeoutError", None)
        connection_error_type = getattr(openai_sdk, "APIConnectionError", None)

        if status_error_type and isinstance(exc, status_error_type):
            status_code = getattr(exc, "status_code", None)
            raise BackendError(message=f"Chat completion request failed with status {status_code}") from exc
        if timeout_error_type and isinstance(exc, timeout_error_type):
            raise BackendError(message="Chat completion request timed out") from exc
        if connection_error_type and isinstance(exc, connection_error_type):
            raise BackendError(message=f"Chat completion request failed: {exc}") from exc
        raise BackendError(message=f"Chat completion request failed: {exc}") from exc

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise BackendError(message="Chat completion returned no choices") from exc
    if not content:
        raise BackendError(message="Chat completion returned empty content")
    return content


def parse_json_object(content: str) -> dict[str, Any]:
    """Decode a JSON object answer.

    Args:
        content (str): Raw message content.

    Raises:
        BackendError: If the content is not a JSON object.

    Returns:
        dict[str, Any]: Decoded object.
    """
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise BackendError(message=f"Backend answered invalid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise BackendError(message="Backend answer must be a JSON object")
    return payload
