"""Document record models owned by the case-management collaborator."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from casedocs.typing.enums import DocumentStatus, DocumentType
from casedocs.typing.models.pipeline import ValidationResult


class ProcessingSummary(BaseModel):
    """Pipeline outcome merged into a document record."""

    model_config = ConfigDict(extra="forbid")

    document_type: DocumentType
    classification_confidence: float
    extracted_data: dict[str, str | None] = Field(default_factory=dict)
    field_confidence: dict[str, float] = Field(default_factory=dict)
    validation: ValidationResult
    processing_time_ms: int
    raw_text: str
    processed_at: datetime


class DocumentRecord(BaseModel):
    """Uploaded document as seen by the processing controller."""

    model_config = ConfigDict(extra="forbid")

    id: str
    case_id: str | None = None
    file_name: str
    storage_key: str
    mime_type: str = "application/octet-stream"
    status: DocumentStatus = DocumentStatus.PENDING
    document_type: DocumentType | None = None
    processing: ProcessingSummary | None = None
