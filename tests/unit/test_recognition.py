from __future__ import annotations

import pytest

from casedocs.exceptions import RecognitionError
from casedocs.imaging import NormalizationOptions
from casedocs.recognition import (
    TEXT_LAYER_CONFIDENCE,
    RecognitionService,
    merge_recognition_results,
    synthesize_from_text,
)
from casedocs.settings import Settings
from casedocs.typing.enums import RecognizerBackendType
from casedocs.typing.models import RecognitionResult, RecognizedToken


class _FakeRecognizer:
    def __init__(self, name: str, *, text: str = "", error: Exception | None = None) -> None:
        self.name = name
        self.text = text
        self.error = error
        self.calls = 0

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        word = RecognizedToken(text=self.text, confidence=80)
        return RecognitionResult(text=self.text, confidence=80, words=(word,))


def test_service_requires_a_recognizer() -> None:
    with pytest.raises(ValueError, match="At least one recognizer"):
        RecognitionService([])


def test_primary_recognizer_result_is_used(make_png) -> None:
    primary = _FakeRecognizer("primary", text="hello")
    alternate = _FakeRecognizer("alternate", text="other")

    result = RecognitionService([primary, alternate]).recognize_image(make_png())

    assert result.text == "hello"
    assert alternate.calls == 0


def test_alternate_recognizer_is_tried_once(make_png) -> None:
    primary = _FakeRecognizer("primary", error=RuntimeError("down"))
    alternate = _FakeRecognizer("alternate", text="fallback")

    result = RecognitionService([primary, alternate]).recognize_image(make_png())

    assert result.text == "fallback"
    assert (primary.calls, alternate.calls) == (1, 1)


def test_page_fails_when_every_recognizer_fails(make_png) -> None:
    service = RecognitionService(
        [
            _FakeRecognizer("primary", error=RuntimeError("down")),
            _FakeRecognizer("alternate", error=OSError("gone")),
        ]
    )

    with pytest.raises(RecognitionError, match="primary: down; alternate: gone"):
        service.recognize_image(make_png())


def test_normalization_failure_is_a_recognition_error() -> None:
    service = RecognitionService([_FakeRecognizer("x")], normalization=NormalizationOptions(grayscale=True))

    with pytest.raises(RecognitionError, match="Image normalization failed"):
        service.recognize_image(b"not an image")


def test_pdf_text_layer_skips_recognition(make_pdf) -> None:
    recognizer = _FakeRecognizer("primary", text="unused")

    results = RecognitionService([recognizer]).recognize_document(make_pdf(["Passport No AB1234567"]))

    assert recognizer.calls == 0
    assert len(results) == 1
    assert results[0].text == "Passport No AB1234567"
    assert results[0].confidence == TEXT_LAYER_CONFIDENCE
    assert results[0].words == ()


def test_scanned_pdf_is_recognized_page_by_page(make_pdf) -> None:
    recognizer = _FakeRecognizer("primary", text="page")

    results = RecognitionService([recognizer], pdf_dpi=36).recognize_document(make_pdf(["", "", ""]))

    assert len(results) == 3
    assert recognizer.calls == 3


def test_cancellation_keeps_completed_pages(make_pdf) -> None:
    recognizer = _FakeRecognizer("primary", text="page")

    results = RecognitionService([recognizer], pdf_dpi=36).recognize_document(
        make_pdf(["", "", ""]),
        should_cancel=lambda: recognizer.calls >= 1,
    )

    assert len(results) == 1


def test_image_payload_yields_one_result(make_png) -> None:
    results = RecognitionService([_FakeRecognizer("primary", text="img")]).recognize_document(make_png())

    assert [result.text for result in results] == ["img"]


def test_merge_recognition_results() -> None:
    first = RecognitionResult(text="a", confidence=80, words=(RecognizedToken(text="a", confidence=80),))
    second = RecognitionResult(text="b", confidence=60, words=(RecognizedToken(text="b", confidence=60),))

    merged = merge_recognition_results([first, second])

    assert merged.text == "a\n\nb"
    assert merged.confidence == 70
    assert [word.text for word in merged.words] == ["a", "b"]
    assert merge_recognition_results([first]) is first
    assert merge_recognition_results([]).confidence == 0


def test_synthesize_from_text() -> None:
    assert synthesize_from_text("x").confidence == TEXT_LAYER_CONFIDENCE


@pytest.mark.parametrize(
    ("api_key", "backend", "expected"),
    [
        (None, RecognizerBackendType.VISION_LLM, ["tesseract"]),
        ("sk-test", RecognizerBackendType.TESSERACT, ["tesseract", "vision_llm"]),
        ("sk-test", RecognizerBackendType.VISION_LLM, ["vision_llm", "tesseract"]),
    ],
)
def test_from_settings_orders_recognizers(
    api_key: str | None,
    backend: RecognizerBackendType,
    expected: list[str],
) -> None:
    settings = Settings(_env_file=None, openai_api_key=api_key, ocr_backend=backend)

    assert RecognitionService.from_settings(settings).recognizer_names == expected
