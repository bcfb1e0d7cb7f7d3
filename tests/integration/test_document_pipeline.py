from __future__ import annotations

import pytest

from casedocs.classifier import DocumentClassifier
from casedocs.orchestrator import DocumentProcessor
from casedocs.recognition import TEXT_LAYER_CONFIDENCE, RecognitionService
from casedocs.typing.enums import DocumentType
from casedocs.typing.models import RecognitionResult, RecognizedToken
from casedocs.validator import DocumentValidator

PASSPORT_LINES = [
    "PASSPORT",
    "Passport No: AB1234567",
    "Surname: MURPHY",
    "Given Names: SEAN PATRICK",
    "Nationality: IRISH",
    "Date of Birth: 15/03/1985",
    "Date of Expiry: 01/02/2030",
]


class _PageRecognizer:
    """Returns one scripted text per call."""

    name = "scripted"

    def __init__(self, *texts: str) -> None:
        self.texts = list(texts)
        self.calls = 0

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        text = self.texts[self.calls]
        self.calls += 1
        words = tuple(RecognizedToken(text=word, confidence=85) for word in text.split())
        return RecognitionResult(text=text, confidence=85, words=words)


class _Unused:
    name = "unused"

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        raise AssertionError("recognizer must not run on a PDF with a text layer")


def _processor(recognizer, today) -> DocumentProcessor:
    return DocumentProcessor(
        RecognitionService([recognizer]),
        DocumentClassifier(),
        validator=DocumentValidator(today=today),
    )


def test_text_layer_pdf_skips_recognition(make_pdf, today) -> None:
    pdf = make_pdf(["\n".join(PASSPORT_LINES)])

    result = _processor(_Unused(), today).process(pdf)

    assert result.recognition.confidence == TEXT_LAYER_CONFIDENCE
    assert result.recognition.words == ()
    assert result.classification.document_type == DocumentType.PASSPORT
    assert result.extraction.fields["passportNumber"] == "AB1234567"
    assert result.extraction.fields["dateOfExpiry"] == "2030-02-01"
    assert result.extraction.confidence["passportNumber"] == 0
    assert result.validation.is_valid is True
    assert result.validation.score == 100
    assert {issue.field for issue in result.validation.warnings} >= {"passportNumber", "surname"}


def test_scanned_pdf_is_recognized_page_by_page(make_pdf, today) -> None:
    recognizer = _PageRecognizer("\n".join(PASSPORT_LINES[:4]), "\n".join(PASSPORT_LINES[4:]))

    result = _processor(recognizer, today).process(make_pdf(["", ""]))

    assert recognizer.calls == 2
    assert result.recognition.confidence == 85
    assert "\n\n" in result.recognition.text
    assert result.classification.document_type == DocumentType.PASSPORT
    assert result.extraction.fields["nationality"] == "IRISH"
    assert result.extraction.confidence["nationality"] == 85
    assert result.validation.warnings == ()


def test_cancellation_keeps_recognized_pages(make_pdf, today) -> None:
    recognizer = _PageRecognizer("PASSPORT Surname: MURPHY", "never read")
    processor = _processor(recognizer, today)

    result = processor.process(make_pdf(["", ""]), should_cancel=lambda: recognizer.calls >= 1)

    assert recognizer.calls == 1
    assert result.recognition.text == "PASSPORT Surname: MURPHY"


@pytest.mark.parametrize(
    ("expiry", "valid"),
    [("01/02/2030", True), ("15/06/2025", True), ("14/06/2025", False)],
)
def test_expiry_against_reference_day(make_recognition, today, expiry: str, valid: bool) -> None:
    text = "\n".join([*PASSPORT_LINES[:-1], f"Date of Expiry: {expiry}"])
    processor = _processor(_Unused(), today)

    result = processor.reprocess_with_type(make_recognition(text), DocumentType.PASSPORT)

    assert result.validation.is_valid is valid
    if not valid:
        assert [issue.field for issue in result.validation.errors] == ["dateOfExpiry"]
        assert result.validation.score == 83
