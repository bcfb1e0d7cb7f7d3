"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class DocumentType(_EnumMixin):
    """Closed vocabulary of supported document types."""

    PASSPORT = "passport"
    VISA = "visa"
    RESIDENCE_PERMIT = "residence_permit"
    BIRTH_CERTIFICATE = "birth_certificate"
    MARRIAGE_CERTIFICATE = "marriage_certificate"
    FINANCIAL = "financial"
    BANK_STATEMENT = "bank_statement"
    TAX_DOCUMENT = "tax_document"
    EMPLOYMENT = "employment"
    EDUCATION = "education"
    LANGUAGE_CERTIFICATE = "language_certificate"
    UTILITY_BILL = "utility_bill"
    MEDICAL = "medical"
    VACCINATION_CERTIFICATE = "vaccination_certificate"
    DRIVING_LICENSE = "driving_license"
    POLICE_CLEARANCE = "police_clearance"
    IDENTIFICATION = "identification"
    OTHER = "other"


class DocumentStatus(_EnumMixin):
    """Processing status of an uploaded document record."""

    PENDING = "pending"
    PROCESSING = "processing"
    VALIDATED = "validated"
    REJECTED = "rejected"


class NotificationType(_EnumMixin):
    """Notification events emitted after validation."""

    DOCUMENT_VALIDATED = "document_validated"
    DOCUMENT_REJECTED = "document_rejected"


class RecognizerBackendType(_EnumMixin):
    """Text recognition backends."""

    TESSERACT = "tesseract"
    VISION_LLM = "vision_llm"


class TemplateStatus(_EnumMixin):
    """Form template lifecycle status."""

    DRAFT = "draft"
    ACTIVE = "active"
    DEPRECATED = "deprecated"


class SubmissionStatus(_EnumMixin):
    """Form submission status."""

    GENERATED = "generated"
    SUBMITTED = "submitted"


class SignatureType(_EnumMixin):
    """How a signature image was produced."""

    DRAWN = "drawn"
    TYPED = "typed"


class FormFieldType(_EnumMixin):
    """Form field input types."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SIGNATURE = "signature"


class PageSize(_EnumMixin):
    """Supported rendered page sizes."""

    A4 = "a4"
    LETTER = "letter"
    LEGAL = "legal"


class PageOrientation(_EnumMixin):
    """Rendered page orientation."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
