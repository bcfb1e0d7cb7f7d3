"""PDF rendering of form templates with PyMuPDF."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from casedocs.exceptions import FormGenerationError
from casedocs.logging import get_logger
from casedocs.typing.enums import PageOrientation, PageSize

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from casedocs.typing.models import TemplateData

logger = get_logger(__name__)

PAGE_SIZES: dict[PageSize, tuple[float, float]] = {
    PageSize.A4: (595.28, 841.89),
    PageSize.LETTER: (612.0, 792.0),
    PageSize.LEGAL: (612.0, 1008.0),
}
VALUE_COLUMN_OFFSET = 200.0
PREVIEW_WATERMARK = "PREVIEW - NOT FOR SUBMISSION"

_BOLD_FONTS = {"helv": "hebo", "tiro": "tibo", "cour": "cobo"}
_WATERMARK_COLOR = (0.9, 0.9, 0.9)
_HEX_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")


def page_dimensions(page_size: PageSize, orientation: PageOrientation) -> tuple[float, float]:
    """Return `(width, height)` in points, swapped for landscape."""
    width, height = PAGE_SIZES[page_size]
    if orientation == PageOrientation.LANDSCAPE:
        return height, width
    return width, height


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Convert `#RRGGBB` to a PyMuPDF color tuple.

    Raises:
        FormGenerationError: If the color is not a six-digit hex value.
    """
    digits = color.lstrip("#")
    if not _HEX_COLOR.match(digits):
        raise FormGenerationError(message=f"Invalid color {color!r}")
    red, green, blue = (int(digits[index : index + 2], 16) / 255 for index in (0, 2, 4))
    return red, green, blue


def format_value(value: object) -> str:
    """Render one form value as text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list | tuple):
        return ", ".join(format_value(item) for item in value)
    return str(value)


def missing_required_fields(required_fields: Iterable[str], values: Mapping[str, Any]) -> list[str]:
    """Return required fields whose value is absent or blank, in declaration order."""
    return [name for name in required_fields if not format_value(values.get(name)).strip()]


class _Layout:
    """Cursor over the pages of a document being rendered."""

    def __init__(self, doc: Any, template_data: TemplateData) -> None:
        self.doc = doc
        self.width, self.height = page_dimensions(template_data.page_size, template_data.orientation)
        self.margins = template_data.margins
        styling = template_data.styling
        self.font = styling.font_family
        self.bold = _BOLD_FONTS.get(styling.font_family, styling.font_family)
        self.font_size = styling.font_size
        self.line_height = styling.line_height
        self.color = hex_to_rgb(styling.primary_color)
        self.secondary = hex_to_rgb(styling.secondary_color)
        self.page = self._new_page()
        self.y = self.margins.top

    def _new_page(self) -> Any:
        return self.doc.new_page(width=self.width, height=self.height)

    def ensure_room(self) -> None:
        """Start a new page when another row would cross the bottom margin."""
        if self.y > self.height - self.margins.bottom - self.line_height * 2:
            self.page = self._new_page()
            self.y = self.margins.top

    def text(
        self,
        x: float,
        text: str,
        *,
        bold: bool = False,
        scale: float = 1.0,
        secondary: bool = False,
    ) -> None:
        if not text:
            return
        self.page.insert_text(
            (x, self.y),
            text,
            fontname=self.bold if bold else self.font,
            fontsize=self.font_size * scale,
            color=self.secondary if secondary else self.color,
        )


def _draw_watermark(page: Any, width: float, height: float, text: str, font_size: float) -> None:
    pivot = fitz.Point(width / 2 - 150, height / 2)
    page.insert_text(
        pivot,
        text,
        fontname="hebo",
        fontsize=font_size * 2,
        color=_WATERMARK_COLOR,
        fill_opacity=0.3,
        morph=(pivot, fitz.Matrix(45)),
    )


def render_form(
    template_data: TemplateData,
    values: Mapping[str, Any],
    *,
    required_fields: Iterable[str] = (),
    watermark: str | None = None,
    stamp: str | None = None,
) -> bytes:
    """Render a form as PDF.

    The title and optional description come first, then every section with one
    label/value row per field. A row that would cross the bottom margin starts a new
    page. Signature and date lines follow the last section; the footer is printed on
    every page.

    Args:
        template_data (TemplateData): Layout.
        values (Mapping[str, Any]): Field values keyed by field id.
        required_fields (Iterable[str]): Fields that must have a non-blank value.
        watermark (str | None): Diagonal text drawn on every page.
        stamp (str | None): Extra line printed under the title.

    Raises:
        FormGenerationError: If a required value is missing, PyMuPDF is unavailable or
            rendering fails. Nothing is returned in that case.

    Returns:
        bytes: PDF document.
    """
    missing = missing_required_fields(required_fields, values)
    if missing:
        raise FormGenerationError(message="Missing required fields", missing_fields=missing)
    if fitz is None:
        raise FormGenerationError(message="PyMuPDF is required for form rendering")

    doc = fitz.open()
    try:
        layout = _Layout(doc, template_data)
        left = layout.margins.left
        line_height = layout.line_height

        layout.text(left, template_data.title, bold=True, scale=1.5)
        layout.y += line_height
        if template_data.description:
            layout.text(left, template_data.description, secondary=True)
            layout.y += line_height
        if stamp:
            layout.text(left, stamp, secondary=True, scale=0.8)
            layout.y += line_height
        layout.y += line_height

        for section in template_data.sections:
            if section.title:
                layout.ensure_room()
                layout.text(left, section.title, bold=True, scale=1.2)
                layout.y += line_height
            if section.description:
                layout.ensure_room()
                layout.text(left, section.description, secondary=True)
                layout.y += line_height
            for field in section.fields:
                layout.ensure_room()
                layout.text(left, f"{field.label}:", bold=True)
                layout.text(left + VALUE_COLUMN_OFFSET, format_value(values.get(field.id or "")))
                layout.y += line_height
            layout.y += line_height

        line_end = left + VALUE_COLUMN_OFFSET + 150
        for label in ("Signature:", "Date:"):
            layout.ensure_room()
            layout.text(left, label, bold=True)
            layout.page.draw_line(
                (left + VALUE_COLUMN_OFFSET, layout.y),
                (line_end, layout.y),
                color=layout.color,
                width=0.5,
            )
            layout.y += line_height * 1.5

        for page in doc:
            if template_data.footer:
                page.insert_text(
                    (left, layout.height - layout.margins.bottom),
                    template_data.footer,
                    fontname=layout.font,
                    fontsize=layout.font_size * 0.8,
                    color=layout.secondary,
                )
            if watermark:
                _draw_watermark(page, layout.width, layout.height, watermark, layout.font_size)

        pages = len(doc)
        pdf_bytes = doc.tobytes()
    except FormGenerationError:
        raise
    except Exception as exc:
        raise FormGenerationError(message=f"Form rendering failed: {exc}") from exc
    finally:
        doc.close()

    logger.info("Form rendered", extra={"pages": pages, "bytes": len(pdf_bytes), "preview": bool(watermark)})
    return pdf_bytes
