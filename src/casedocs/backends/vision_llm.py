"""Remote recognizer transcribing images with an OpenAI-compatible vision model."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from casedocs.backends.openai_chat import create_chat_completion, parse_json_object
from casedocs.exceptions import BackendError
from casedocs.logging import get_logger
from casedocs.prompts import TRANSCRIPTION_PROMPT, schema_response_format
from casedocs.typing.models import RecognitionResult, RecognizedToken, clamp_confidence

if TYPE_CHECKING:
    from casedocs.settings import Settings

logger = get_logger(__name__)

_PNG_MAGIC = b"\x89PNG"
_JPEG_MAGIC = b"\xff\xd8"


class _Line(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    confidence: float = Field(description="Legibility of the line from 0 to 100.")


class _TranscriptionResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    lines: list[_Line]


def _mime_type(image_bytes: bytes) -> str:
    if image_bytes.startswith(_PNG_MAGIC):
        return "image/png"
    if image_bytes.startswith(_JPEG_MAGIC):
        return "image/jpeg"
    return "application/octet-stream"


class VisionLLMRecognizer:
    """Recognizer asking a vision model for a line-by-line transcription.

    The model reports no geometry, so bounding boxes are zeroed and every word
    inherits the confidence of its line.
    """

    name = "vision_llm"

    def __init__(self, settings: Settings) -> None:
        """Initialize recognizer.

        Args:
            settings (Settings): Runtime settings.
        """
        self._settings = settings

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        """Transcribe an image.

        Args:
            image_bytes (bytes): Encoded image.

        Raises:
            BackendError: If the request fails or the answer is malformed.

        Returns:
            RecognitionResult: Recognized text.
        """
        encoded = base64.b64encode(image_bytes).decode("ascii")
        data_url = f"data:{_mime_type(image_bytes)};base64,{encoded}"
        response_format = schema_response_format("transcription", _TranscriptionResponse.model_json_schema())
        payload = {
            "model": self._settings.effective_vision_model,
            "temperature": 0,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": TRANSCRIPTION_PROMPT},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                },
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": response_format.model_dump(mode="json", by_alias=True),
            },
        }

        content = create_chat_completion(self._settings, payload, timeout=self._settings.ocr_timeout)
        try:
            parsed = _TranscriptionResponse.model_validate(parse_json_object(content))
        except ValidationError as exc:
            message = f"Malformed transcription answer: {exc.error_count()} error(s)"
            raise BackendError(message=message) from exc

        result = result_from_lines([(line.text, line.confidence) for line in parsed.lines])
        logger.info(
            "Text recognized",
            extra={
                "backend": self.name,
                "lines": len(result.lines),
                "confidence": round(result.confidence, 1),
            },
        )
        return result


def result_from_lines(lines: list[tuple[str, float]]) -> RecognitionResult:
    """Build a recognition result from transcribed lines.

    Args:
        lines (list[tuple[str, float]]): Line text and confidence pairs.

    Returns:
        RecognitionResult: Result with zeroed boxes.
    """
    line_tokens: list[RecognizedToken] = []
    words: list[RecognizedToken] = []
    for raw_text, raw_confidence in lines:
        text = raw_text.strip()
        if not text:
            continue
        confidence = clamp_confidence(raw_confidence)
        line_tokens.append(RecognizedToken(text=text, confidence=confidence))
        words.extend(RecognizedToken(text=part, confidence=confidence) for part in text.split())

    mean = sum(word.confidence for word in words) / len(words) if words else 0.0
    return RecognitionResult(
        text="\n".join(line.text for line in line_tokens),
        confidence=mean,
        words=tuple(words),
        lines=tuple(line_tokens),
    )
