"""Classification, extraction, validation and processing result models."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from casedocs.typing.enums import DocumentType
from casedocs.typing.models.recognition import RecognitionResult

MAX_ALTERNATIVES = 3


def clamp_confidence(value: float) -> float:
    """Clamp a confidence score to the [0, 100] range.

    Args:
        value (float): Raw score.

    Returns:
        float: Clamped score.
    """
    return max(0.0, min(100.0, float(value)))


class DocumentTypeScore(BaseModel):
    """Candidate document type with its confidence."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    document_type: DocumentType
    confidence: float

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_confidence(value)


class ClassificationResult(BaseModel):
    """Document type assigned to recognized text."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    document_type: DocumentType
    confidence: float
    alternatives: tuple[DocumentTypeScore, ...] = ()

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_confidence(value)

    @model_validator(mode="after")
    def _check_alternatives(self) -> Self:
        if len(self.alternatives) > MAX_ALTERNATIVES:
            message = f"At most {MAX_ALTERNATIVES} alternatives are allowed"
            raise ValueError(message)
        if any(alt.document_type == self.document_type for alt in self.alternatives):
            message = "Alternatives must not repeat the winning document type"
            raise ValueError(message)
        confidences = [alt.confidence for alt in self.alternatives]
        if confidences != sorted(confidences, reverse=True):
            message = "Alternatives must be sorted by descending confidence"
            raise ValueError(message)
        return self

    @classmethod
    def forced(cls, document_type: DocumentType) -> ClassificationResult:
        """Build the result used when an operator supplies the type."""
        return cls(document_type=document_type, confidence=100, alternatives=())


class ExtractedData(BaseModel):
    """Extracted field values with per-field confidence."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    fields: dict[str, str | None] = Field(default_factory=dict)
    confidence: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_consistency(self) -> Self:
        if set(self.fields) != set(self.confidence):
            message = "Every extracted field needs exactly one confidence entry"
            raise ValueError(message)
        for name, value in self.fields.items():
            if value is None and self.confidence[name] != 0:
                message = f"Missing field '{name}' must carry confidence 0"
                raise ValueError(message)
        return self


class ValidationIssue(BaseModel):
    """One validation error or warning."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    message: str


class ValidationResult(BaseModel):
    """Validation verdict of extracted data."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    score: int = Field(ge=0, le=100)
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        """Return True iff there is no validation error."""
        return not self.errors


class ProcessingResult(BaseModel):
    """Everything the pipeline produced for one source document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    recognition: RecognitionResult
    classification: ClassificationResult
    extraction: ExtractedData
    validation: ValidationResult
    processing_time_ms: int = Field(ge=0)
