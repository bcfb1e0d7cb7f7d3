"""Typing-centric domain modules."""

from casedocs.typing.enums import DocumentStatus, DocumentType, RecognizerBackendType
from casedocs.typing.models import (
    ClassificationResult,
    DocumentTypeScore,
    ExtractedData,
    ProcessingResult,
    RecognitionResult,
    RecognizedToken,
    ValidationIssue,
    ValidationResult,
)
from casedocs.typing.protocol import (
    BlobStorage,
    ClassificationStrategy,
    DocumentRecordStore,
    NotificationSink,
    TextRecognizer,
)

__all__ = [
    "BlobStorage",
    "ClassificationResult",
    "ClassificationStrategy",
    "DocumentRecordStore",
    "DocumentStatus",
    "DocumentType",
    "DocumentTypeScore",
    "ExtractedData",
    "NotificationSink",
    "ProcessingResult",
    "RecognitionResult",
    "RecognizedToken",
    "RecognizerBackendType",
    "TextRecognizer",
    "ValidationIssue",
    "ValidationResult",
]
