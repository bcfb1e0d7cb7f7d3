"""Core domain model exports."""

from casedocs.typing.models.documents import DocumentRecord, ProcessingSummary
from casedocs.typing.models.forms import (
    FieldConstraints,
    FormField,
    FormSection,
    FormSignature,
    FormSubmission,
    FormTemplate,
    FormTemplateVersion,
    Margins,
    SignatureVerification,
    Styling,
    TemplateData,
    TemplateDraft,
    TemplateUpdate,
)
from casedocs.typing.models.json_schema import SanitizedJsonSchema
from casedocs.typing.models.pipeline import (
    MAX_ALTERNATIVES,
    ClassificationResult,
    DocumentTypeScore,
    ExtractedData,
    ProcessingResult,
    ValidationIssue,
    ValidationResult,
    clamp_confidence,
)
from casedocs.typing.models.recognition import BoundingBox, RecognitionResult, RecognizedToken

__all__ = [
    "MAX_ALTERNATIVES",
    "BoundingBox",
    "ClassificationResult",
    "DocumentRecord",
    "DocumentTypeScore",
    "ExtractedData",
    "FieldConstraints",
    "FormField",
    "FormSection",
    "FormSignature",
    "FormSubmission",
    "FormTemplate",
    "FormTemplateVersion",
    "Margins",
    "ProcessingResult",
    "ProcessingSummary",
    "RecognitionResult",
    "RecognizedToken",
    "SanitizedJsonSchema",
    "SignatureVerification",
    "Styling",
    "TemplateData",
    "TemplateDraft",
    "TemplateUpdate",
    "ValidationIssue",
    "ValidationResult",
    "clamp_confidence",
]
