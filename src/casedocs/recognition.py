"""Recognizer selection, alternate-backend retry and multi-page documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from casedocs.backends import TesseractRecognizer, VisionLLMRecognizer
from casedocs.exceptions import BackendError, RecognitionError
from casedocs.fallback import first_successful
from casedocs.imaging import NormalizationOptions, normalize_image
from casedocs.logging import get_logger
from casedocs.pdf import extract_text_layer, is_pdf, rasterize_pages
from casedocs.typing.enums import RecognizerBackendType
from casedocs.typing.models import RecognitionResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from casedocs.settings import Settings
    from casedocs.typing.protocol import TextRecognizer

logger = get_logger(__name__)

TEXT_LAYER_CONFIDENCE = 95.0


def synthesize_from_text(text: str, confidence: float = TEXT_LAYER_CONFIDENCE) -> RecognitionResult:
    """Wrap directly extracted text in a recognition result without word geometry."""
    return RecognitionResult(text=text, confidence=confidence)


def merge_recognition_results(pages: Sequence[RecognitionResult]) -> RecognitionResult:
    """Merge per-page results into one.

    Page texts are joined with a blank line, words and lines are concatenated and the
    confidence is the mean page confidence.

    Args:
        pages (Sequence[RecognitionResult]): Results in page order.

    Returns:
        RecognitionResult: Merged result; empty with confidence 0 when there is no page.
    """
    if not pages:
        return RecognitionResult(text="", confidence=0)
    if len(pages) == 1:
        return pages[0]
    return RecognitionResult(
        text="\n\n".join(page.text for page in pages),
        confidence=sum(page.confidence for page in pages) / len(pages),
        words=tuple(word for page in pages for word in page.words),
        lines=tuple(line for page in pages for line in page.lines),
    )


class RecognitionService:
    """Runs the primary recognizer and retries once on the alternate one."""

    def __init__(
        self,
        recognizers: Sequence[TextRecognizer],
        *,
        timeout: float | None = None,
        normalization: NormalizationOptions | None = None,
        pdf_dpi: int = 200,
    ) -> None:
        """Initialize the service.

        Args:
            recognizers (Sequence[TextRecognizer]): Primary recognizer first, then alternates.
            timeout (float | None): Per-page, per-recognizer timeout in seconds.
            normalization (NormalizationOptions | None): Image normalization applied first.
            pdf_dpi (int): Resolution used for scanned PDF pages.

        Raises:
            ValueError: If no recognizer is given.
        """
        if not recognizers:
            message = "At least one recognizer is required"
            raise ValueError(message)
        self._recognizers = tuple(recognizers)
        self._timeout = timeout
        self._normalization = normalization or NormalizationOptions()
        self._pdf_dpi = pdf_dpi

    @classmethod
    def from_settings(cls, settings: Settings) -> RecognitionService:
        """Build the recognizer chain described by settings.

        The remote recognizer only joins the chain when an API key is configured.

        Args:
            settings (Settings): Runtime settings.

        Returns:
            RecognitionService: Configured service.
        """
        local = TesseractRecognizer(language=settings.ocr_language, timeout=settings.ocr_timeout)
        recognizers: list[TextRecognizer] = [local]
        if settings.openai_api_key:
            remote = VisionLLMRecognizer(settings)
            if settings.ocr_backend == RecognizerBackendType.VISION_LLM:
                recognizers.insert(0, remote)
            else:
                recognizers.append(remote)
        normalization = NormalizationOptions.recommended() if settings.ocr_preprocess else None
        return cls(
            recognizers,
            timeout=settings.ocr_timeout,
            normalization=normalization,
            pdf_dpi=settings.pdf_render_dpi,
        )

    @property
    def recognizer_names(self) -> list[str]:
        """Return recognizer names in the order they are tried."""
        return [recognizer.name for recognizer in self._recognizers]

    def recognize_image(self, image_bytes: bytes) -> RecognitionResult:
        """Normalize and recognize one image.

        Args:
            image_bytes (bytes): Encoded image.

        Raises:
            RecognitionError: If normalization fails or every recognizer failed.

        Returns:
            RecognitionResult: Recognized text.
        """
        try:
            prepared = normalize_image(image_bytes, self._normalization)
        except BackendError as exc:
            raise RecognitionError(message=f"Image normalization failed: {exc}") from exc

        attempts = [
            (recognizer.name, lambda recognizer=recognizer: recognizer.recognize(prepared))
            for recognizer in self._recognizers
        ]
        try:
            _, result = first_successful(
                attempts,
                timeout=self._timeout,
                failure_event="Recognizer failed, trying alternate",
            )
        except BackendError as exc:
            raise RecognitionError(message=str(exc)) from exc
        return result

    def recognize_document(
        self,
        data: bytes,
        *,
        should_cancel: Callable[[], bool] | None = None,
    ) -> list[RecognitionResult]:
        """Recognize an image or every page of a PDF.

        A PDF with a non-empty text layer skips recognition entirely and yields one
        synthesized result. Scanned PDF pages are recognized one call per page;
        `should_cancel` is checked before each page and stops the loop early, keeping
        the pages already recognized.

        Args:
            data (bytes): Image or PDF payload.
            should_cancel (Callable[[], bool] | None): Cooperative cancellation check.

        Raises:
            RecognitionError: If a page cannot be recognized or the PDF cannot be read.

        Returns:
            list[RecognitionResult]: One result per recognized page, in page order.
        """
        if not is_pdf(data):
            return [self.recognize_image(data)]

        try:
            text = extract_text_layer(data)
        except BackendError as exc:
            raise RecognitionError(message=str(exc)) from exc
        if text:
            logger.info("PDF text layer used", extra={"chars": len(text)})
            return [synthesize_from_text(text)]

        results: list[RecognitionResult] = []
        try:
            for index, page in enumerate(rasterize_pages(data, dpi=self._pdf_dpi)):
                if should_cancel is not None and should_cancel():
                    logger.info("Recognition cancelled", extra={"completed_pages": index})
                    break
                results.append(self.recognize_image(page))
        except BackendError as exc:
            raise RecognitionError(message=str(exc)) from exc
        return results
