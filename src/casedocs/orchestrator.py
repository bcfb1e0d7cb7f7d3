"""Document pipeline: recognize, classify, extract and validate."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from casedocs.classifier import DocumentClassifier
from casedocs.dependencies import ensure_pipeline_dependencies
from casedocs.extractor import FieldExtractor
from casedocs.logging import get_logger
from casedocs.recognition import RecognitionService, merge_recognition_results
from casedocs.typing.models import ClassificationResult, ProcessingResult
from casedocs.validator import DocumentValidator

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from casedocs.settings import Settings
    from casedocs.typing.enums import DocumentType
    from casedocs.typing.models import RecognitionResult

logger = get_logger(__name__)

DEFAULT_MAX_WORKERS = 4


class DocumentProcessor:
    """Stateless pipeline over injected stage services.

    Instances hold no per-document state and may be shared between threads.
    """

    def __init__(
        self,
        recognition: RecognitionService,
        classifier: DocumentClassifier,
        extractor: FieldExtractor | None = None,
        validator: DocumentValidator | None = None,
    ) -> None:
        self._recognition = recognition
        self._classifier = classifier
        self._extractor = extractor or FieldExtractor()
        self._validator = validator or DocumentValidator()

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentProcessor:
        """Build the pipeline described by settings.

        Args:
            settings (Settings): Runtime settings.

        Raises:
            DependencyError: If a backend the settings require is not installed.

        Returns:
            DocumentProcessor: Configured processor.
        """
        ensure_pipeline_dependencies(settings)
        return cls(
            recognition=RecognitionService.from_settings(settings),
            classifier=DocumentClassifier.from_settings(settings),
            validator=DocumentValidator(low_confidence_threshold=settings.low_confidence_threshold),
        )

    def process(
        self,
        data: bytes,
        *,
        should_cancel: Callable[[], bool] | None = None,
    ) -> ProcessingResult:
        """Run the full pipeline on an image or PDF.

        Args:
            data (bytes): Image or PDF payload.
            should_cancel (Callable[[], bool] | None): Checked between PDF pages.

        Raises:
            RecognitionError: If recognition failed on every backend.

        Returns:
            ProcessingResult: Stage outputs and wall-clock duration.
        """
        started = time.perf_counter()
        recognition = self._recognize(data, should_cancel)
        classification = self._classifier.classify(recognition.text)
        return self._finish(recognition, classification, started)

    def process_with_known_type(
        self,
        data: bytes,
        document_type: DocumentType,
        *,
        should_cancel: Callable[[], bool] | None = None,
    ) -> ProcessingResult:
        """Run the pipeline with an operator-supplied type, skipping classification.

        Args:
            data (bytes): Image or PDF payload.
            document_type (DocumentType): Forced type.
            should_cancel (Callable[[], bool] | None): Checked between PDF pages.

        Returns:
            ProcessingResult: Result whose classification has confidence 100 and no alternatives.
        """
        started = time.perf_counter()
        recognition = self._recognize(data, should_cancel)
        return self._finish(recognition, ClassificationResult.forced(document_type), started)

    def reprocess_with_type(
        self,
        recognition: RecognitionResult,
        document_type: DocumentType,
    ) -> ProcessingResult:
        """Re-run extraction and validation on an earlier recognition result.

        Args:
            recognition (RecognitionResult): Previously recognized text.
            document_type (DocumentType): Forced type.

        Returns:
            ProcessingResult: Fresh extraction and validation, no recognition call.
        """
        started = time.perf_counter()
        return self._finish(recognition, ClassificationResult.forced(document_type), started)

    def process_many(
        self,
        items: Sequence[bytes],
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> list[ProcessingResult | Exception]:
        """Process independent documents concurrently.

        Args:
            items (Sequence[bytes]): Document payloads.
            max_workers (int): Thread pool size.

        Raises:
            ValueError: If `max_workers` is not positive.

        Returns:
            list[ProcessingResult | Exception]: One entry per input, in input order. A
            failed document yields its exception.
        """
        if max_workers < 1:
            message = f"max_workers must be positive, got {max_workers}"
            raise ValueError(message)
        if not items:
            return []

        results: list[ProcessingResult | Exception] = []
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="casedocs-doc") as executor:
            futures = [executor.submit(self.process, item) for item in items]
            for index, future in enumerate(futures):
                try:
                    results.append(future.result())
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Document failed in batch", extra={"index": index, "error": str(exc)})
                    results.append(exc)
        return results

    def _recognize(self, data: bytes, should_cancel: Callable[[], bool] | None) -> RecognitionResult:
        pages = self._recognition.recognize_document(data, should_cancel=should_cancel)
        return merge_recognition_results(pages)

    def _finish(
        self,
        recognition: RecognitionResult,
        classification: ClassificationResult,
        started: float,
    ) -> ProcessingResult:
        extraction = self._extractor.extract(recognition, classification.document_type)
        validation = self._validator.validate(extraction, classification.document_type)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Document processed",
            extra={
                "document_type": classification.document_type.value,
                "is_valid": validation.is_valid,
                "score": validation.score,
                "processing_time_ms": elapsed_ms,
            },
        )
        return ProcessingResult(
            recognition=recognition,
            classification=classification,
            extraction=extraction,
            validation=validation,
            processing_time_ms=elapsed_ms,
        )
