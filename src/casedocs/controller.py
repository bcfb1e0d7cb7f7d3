"""Document-record integration around the processing pipeline."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from casedocs.logging import get_logger
from casedocs.typing.enums import DocumentStatus, NotificationType
from casedocs.typing.models import ProcessingSummary

if TYPE_CHECKING:
    from casedocs.orchestrator import DocumentProcessor
    from casedocs.typing.enums import DocumentType
    from casedocs.typing.models import ProcessingResult
    from casedocs.typing.protocol import BlobStorage, DocumentRecordStore, NotificationSink

logger = get_logger(__name__)


def summarize(result: ProcessingResult, *, processed_at: datetime | None = None) -> ProcessingSummary:
    """Flatten a processing result into the summary stored on a document record.

    Args:
        result (ProcessingResult): Pipeline output.
        processed_at (datetime | None): Completion time. Defaults to now (UTC).

    Returns:
        ProcessingSummary: Record summary.
    """
    return ProcessingSummary(
        document_type=result.classification.document_type,
        classification_confidence=result.classification.confidence,
        extracted_data=dict(result.extraction.fields),
        field_confidence=dict(result.extraction.confidence),
        validation=result.validation,
        processing_time_ms=result.processing_time_ms,
        raw_text=result.recognition.text,
        processed_at=processed_at or datetime.now(UTC),
    )


class DocumentProcessingController:
    """Loads a stored document, runs the pipeline and records the outcome."""

    def __init__(
        self,
        processor: DocumentProcessor,
        records: DocumentRecordStore,
        storage: BlobStorage,
        notifier: NotificationSink,
    ) -> None:
        self._processor = processor
        self._records = records
        self._storage = storage
        self._notifier = notifier

    def process_document(
        self,
        document_id: str,
        user_id: str,
        *,
        force_reprocess: bool = False,
        document_type: DocumentType | None = None,
    ) -> ProcessingSummary:
        """Process one stored document and update its record.

        An already processed document returns its stored summary unless
        `force_reprocess` is set. On success the record becomes `validated` or
        `rejected` and exactly one notification is sent. On any failure, including a
        failed notification, the record is put back to `pending` without a summary so
        the next call processes and notifies again.

        Args:
            document_id (str): Record identifier.
            user_id (str): User receiving the notification.
            force_reprocess (bool): Ignore a stored summary.
            document_type (DocumentType | None): Operator-forced type.

        Returns:
            ProcessingSummary: Stored or fresh processing summary.
        """
        record = self._records.get(document_id)
        if record.processing is not None and not force_reprocess:
            return record.processing

        try:
            self._records.set_status(document_id, DocumentStatus.PROCESSING)
            data = self._storage.read(record.storage_key)
            if document_type is not None:
                result = self._processor.process_with_known_type(data, document_type)
            else:
                result = self._processor.process(data)

            summary = summarize(result)
            status = DocumentStatus.VALIDATED if result.validation.is_valid else DocumentStatus.REJECTED
            updated = record.model_copy(
                update={
                    "status": status,
                    "document_type": summary.document_type,
                    "processing": summary,
                }
            )
            self._records.save(updated)
            self._notify(document_id, user_id, summary)
        except Exception as exc:
            logger.error(
                "Document processing failed",
                extra={"document_id": document_id, "error": str(exc)},
            )
            # A stored summary would short-circuit the retry.
            reset = record.model_copy(update={"status": DocumentStatus.PENDING, "processing": None})
            self._records.save(reset)
            raise

        logger.info(
            "Document record updated",
            extra={"document_id": document_id, "status": status.value},
        )
        return summary

    def reprocess_document_with_type(
        self,
        document_id: str,
        document_type: DocumentType,
        user_id: str,
    ) -> ProcessingSummary:
        """Reprocess a document with an operator-forced type."""
        return self.process_document(document_id, user_id, force_reprocess=True, document_type=document_type)

    def _notify(self, document_id: str, user_id: str, summary: ProcessingSummary) -> None:
        validation = summary.validation
        kind = summary.document_type.value
        if validation.is_valid:
            notification_type = NotificationType.DOCUMENT_VALIDATED
            title = "Document Validated"
            message = f"Your {kind} has been validated successfully."
        else:
            notification_type = NotificationType.DOCUMENT_REJECTED
            title = "Document Validation Failed"
            message = f"Your {kind} validation failed. Please check the issues and upload a new document."

        self._notifier.notify(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            metadata={
                "document_id": document_id,
                "document_type": kind,
                "validation_score": validation.score,
                "errors": [issue.model_dump() for issue in validation.errors],
                "warnings": [issue.model_dump() for issue in validation.warnings],
            },
        )
