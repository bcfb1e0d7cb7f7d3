"""Local offline recognizer backed by Tesseract."""

from __future__ import annotations

import io
from typing import Any

try:
    import pytesseract
except Exception:  # pragma: no cover - optional dependency at runtime
    pytesseract: Any
    pytesseract = None

try:
    from PIL import Image
except Exception:  # pragma: no cover - optional dependency at runtime
    Image: Any
    Image = None

from casedocs.exceptions import BackendError
from casedocs.logging import get_logger
from casedocs.typing.models import BoundingBox, RecognitionResult, RecognizedToken

logger = get_logger(__name__)


class TesseractRecognizer:
    """Recognizer running `tesseract` through pytesseract."""

    name = "tesseract"

    def __init__(self, *, language: str = "eng", timeout: float | None = None, config: str = "") -> None:
        """Initialize recognizer.

        Args:
            language (str): Tesseract language pack(s), e.g. `eng+fra`.
            timeout (float | None): Timeout handed to tesseract, in seconds.
            config (str): Extra tesseract CLI options.
        """
        self._language = language
        self._timeout = timeout or 0
        self._config = config

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        """Recognize words and lines in an image.

        Args:
            image_bytes (bytes): Encoded image.

        Raises:
            BackendError: If pytesseract or Pillow is missing, or tesseract fails.

        Returns:
            RecognitionResult: Recognized text.
        """
        if pytesseract is None or Image is None:
            raise BackendError(message="pytesseract and Pillow are required for tesseract recognition")

        try:
            image = Image.open(io.BytesIO(image_bytes))
            data = pytesseract.image_to_data(
                image,
                lang=self._language,
                config=self._config,
                output_type=pytesseract.Output.DICT,
                timeout=self._timeout,
            )
        except Exception as exc:
            raise BackendError(message=f"Tesseract recognition failed: {exc}") from exc

        result = result_from_tesseract_data(data)
        logger.info(
            "Text recognized",
            extra={
                "backend": self.name,
                "words": len(result.words),
                "confidence": round(result.confidence, 1),
            },
        )
        return result


def _box(data: dict[str, list[Any]], index: int) -> BoundingBox:
    left, top = float(data["left"][index]), float(data["top"][index])
    width, height = float(data["width"][index]), float(data["height"][index])
    return BoundingBox(x0=left, y0=top, x1=left + width, y1=top + height)


def _union(boxes: list[BoundingBox]) -> BoundingBox:
    return BoundingBox(
        x0=min(box.x0 for box in boxes),
        y0=min(box.y0 for box in boxes),
        x1=max(box.x1 for box in boxes),
        y1=max(box.y1 for box in boxes),
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def result_from_tesseract_data(data: dict[str, list[Any]]) -> RecognitionResult:
    """Build a recognition result from `pytesseract.image_to_data` output.

    Entries with an empty text or a negative confidence (layout rows) are ignored.
    Words are grouped into lines by block, paragraph and line number.

    Args:
        data (dict[str, list[Any]]): `Output.DICT` payload.

    Returns:
        RecognitionResult: Words, lines and the text joined line by line.
    """
    words: list[RecognizedToken] = []
    grouped: dict[tuple[int, int, int], list[RecognizedToken]] = {}

    for index, raw_text in enumerate(data.get("text", [])):
        text = str(raw_text).strip()
        confidence = float(data["conf"][index])
        if not text or confidence < 0:
            continue
        word = RecognizedToken(text=text, confidence=min(confidence, 100.0), bounding_box=_box(data, index))
        words.append(word)
        key = (int(data["block_num"][index]), int(data["par_num"][index]), int(data["line_num"][index]))
        grouped.setdefault(key, []).append(word)

    lines = [
        RecognizedToken(
            text=" ".join(word.text for word in line_words),
            confidence=_mean([word.confidence for word in line_words]),
            bounding_box=_union([word.bounding_box for word in line_words]),
        )
        for line_words in grouped.values()
    ]
    return RecognitionResult(
        text="\n".join(line.text for line in lines),
        confidence=_mean([word.confidence for word in words]),
        words=tuple(words),
        lines=tuple(lines),
    )
