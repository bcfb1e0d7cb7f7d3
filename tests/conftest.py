"""Pytest marker auto-assignment by folder and shared document fixtures."""

from __future__ import annotations

import base64
import io
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import fitz
import pytest
from PIL import Image, ImageDraw

from casedocs import logger
from casedocs.typing.enums import DocumentType, FormFieldType
from casedocs.typing.models import (
    FormField,
    FormSection,
    RecognitionResult,
    RecognizedToken,
    TemplateData,
    TemplateDraft,
)

FIXED_TODAY = date(2025, 6, 15)


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except OSError:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def recognition_from_text(text: str, confidence: float = 90.0) -> RecognitionResult:
    """Build a recognition result whose words all carry `confidence`."""
    words = tuple(RecognizedToken(text=word, confidence=confidence) for word in text.split())
    stripped = [line.strip() for line in text.splitlines()]
    lines = tuple(RecognizedToken(text=line, confidence=confidence) for line in stripped if line)
    return RecognitionResult(text=text, confidence=confidence if words else 0.0, words=words, lines=lines)


def png_bytes(size: tuple[int, int] = (120, 60), color: str = "white", *, draw_bar: bool = True) -> bytes:
    """Return a small PNG, optionally with a dark horizontal bar."""
    image = Image.new("RGB", size, color)
    if draw_bar:
        ImageDraw.Draw(image).rectangle((10, size[1] // 2 - 4, size[0] - 10, size[1] // 2 + 4), fill="black")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def pdf_bytes(pages: list[str]) -> bytes:
    """Return a PDF with one page per entry; an empty entry yields a blank page."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    payload = doc.tobytes()
    doc.close()
    return payload


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest.fixture
def make_recognition():
    return recognition_from_text


@pytest.fixture
def make_png():
    return png_bytes


@pytest.fixture
def make_pdf():
    return pdf_bytes


def template_draft(name: str = "Visa Application", *, sections: int = 1) -> TemplateDraft:
    """Return a valid draft with an applicant section and optional filler sections."""
    applicant = FormSection(
        title="Applicant",
        fields=[
            FormField(id="fullName", type=FormFieldType.TEXT, label="Full name", required=True),
            FormField(id="passportNumber", type=FormFieldType.TEXT, label="Passport number", required=True),
            FormField(id="married", type=FormFieldType.CHECKBOX, label="Married"),
        ],
    )
    filler = [
        FormSection(
            title=f"Details {index}",
            fields=[FormField(id=f"note{index}", type=FormFieldType.TEXTAREA, label=f"Note {index}")],
        )
        for index in range(1, sections)
    ]
    return TemplateDraft(
        name=name,
        document_types=[DocumentType.VISA, DocumentType.PASSPORT],
        required_fields=["fullName", "passportNumber"],
        optional_fields=["married"],
        field_mappings={"fullName": "Full name", "passportNumber": "Passport number", "married": "Married"},
        template_data=TemplateData(title=name, description="Application form", sections=[applicant, *filler]),
    )


def signature_data_url(*, fmt: str = "png") -> str:
    """Return a signature image as a base64 data URL."""
    image = Image.new("RGB", (150, 50), "white")
    ImageDraw.Draw(image).line((5, 40, 145, 10), fill="black", width=3)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG" if fmt == "png" else "JPEG")
    return f"data:image/{fmt};base64,{base64.b64encode(buffer.getvalue()).decode('ascii')}"


@pytest.fixture
def make_draft():
    return template_draft


@pytest.fixture
def make_signature():
    return signature_data_url


class TickingClock:
    """Clock advancing one second per call, starting at a fixed instant."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 6, 15, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()
