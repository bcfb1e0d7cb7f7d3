"""Capability interfaces shared by backends and collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from casedocs.typing.enums import DocumentStatus, NotificationType
    from casedocs.typing.models import ClassificationResult, DocumentRecord, RecognitionResult


class TextRecognizer(Protocol):
    """Turns one raster image into recognized text."""

    name: str

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        """Recognize text in an image.

        Args:
            image_bytes: Encoded raster image (PNG, JPEG, TIFF...).

        Returns:
            RecognitionResult: Text with word and line confidences.
        """


class ClassificationStrategy(Protocol):
    """One way of assigning a document type to recognized text."""

    name: str

    def classify(self, text: str) -> ClassificationResult:
        """Classify recognized text.

        Args:
            text: Recognized text.

        Returns:
            ClassificationResult: Best type, confidence and alternatives.
        """


class BlobStorage(Protocol):
    """Byte storage keyed by path-like strings."""

    def read(self, key: str) -> bytes:
        """Return stored bytes for `key`."""

    def write(self, key: str, data: bytes, *, overwrite: bool = False) -> str:
        """Store `data` under `key` and return the key."""

    def exists(self, key: str) -> bool:
        """Return whether `key` is stored."""


class DocumentRecordStore(Protocol):
    """Persistence of uploaded document records."""

    def get(self, document_id: str) -> DocumentRecord:
        """Return the record for `document_id`."""

    def set_status(self, document_id: str, status: DocumentStatus) -> None:
        """Update the record status."""

    def save(self, record: DocumentRecord) -> None:
        """Persist the full record."""


class NotificationSink(Protocol):
    """Delivers notification events to users."""

    def notify(
        self,
        *,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        metadata: dict[str, Any],
    ) -> None:
        """Send one notification."""
