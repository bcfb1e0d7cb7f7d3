"""PDF text-layer extraction and page rasterisation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from casedocs.exceptions import BackendError
from casedocs.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)

_PDF_MAGIC = b"%PDF"


def is_pdf(data: bytes) -> bool:
    """Return whether the payload looks like a PDF file."""
    return data.lstrip()[:4] == _PDF_MAGIC


def _open(pdf_bytes: bytes) -> Any:
    if fitz is None:
        raise BackendError(message="PyMuPDF is required for PDF processing")
    try:
        return fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as exc:
        raise BackendError(message=f"Cannot open PDF: {exc}") from exc


def extract_text_layer(pdf_bytes: bytes) -> str:
    """Return the embedded text of every page, pages separated by a blank line.

    Args:
        pdf_bytes (bytes): PDF payload.

    Raises:
        BackendError: If PyMuPDF is unavailable or the PDF cannot be read.

    Returns:
        str: Stripped text, empty for scanned PDFs.
    """
    with _open(pdf_bytes) as doc:
        texts = [page.get_text("text").strip() for page in doc]
    text = "\n\n".join(part for part in texts if part)
    logger.debug("PDF text layer read", extra={"pages": len(texts), "chars": len(text)})
    return text


def rasterize_pages(pdf_bytes: bytes, *, dpi: int) -> Iterator[bytes]:
    """Render PDF pages to PNG one at a time.

    Pages are produced lazily so a caller can stop between pages.

    Args:
        pdf_bytes (bytes): PDF payload.
        dpi (int): Render resolution.

    Raises:
        BackendError: If PyMuPDF is unavailable or rendering fails.

    Yields:
        bytes: PNG image of the next page.
    """
    with _open(pdf_bytes) as doc:
        for index in range(len(doc)):
            try:
                pixmap = doc.load_page(index).get_pixmap(dpi=dpi)
                image_bytes = pixmap.tobytes(output="png")
            except Exception as exc:
                raise BackendError(message=f"Failed to render PDF page {index + 1}") from exc
            yield image_bytes
