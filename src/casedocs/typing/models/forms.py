"""Form template, submission and signature models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from casedocs.typing.enums import (
    DocumentType,
    FormFieldType,
    PageOrientation,
    PageSize,
    SignatureType,
    SubmissionStatus,
    TemplateStatus,
)


class FieldConstraints(BaseModel):
    """Optional input constraints of a form field."""

    model_config = ConfigDict(extra="forbid")

    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    min: float | None = None
    max: float | None = None


class FormField(BaseModel):
    """One labeled field of a form section.

    `id`, `type` and `label` are optional at the model level so that template
    validation can report every missing attribute at once.
    """

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    type: FormFieldType | None = None
    label: str | None = None
    required: bool = False
    placeholder: str | None = None
    help_text: str | None = None
    default_value: str | None = None
    options: list[str] = Field(default_factory=list)
    validation: FieldConstraints | None = None


class FormSection(BaseModel):
    """Ordered group of fields."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    fields: list[FormField] = Field(default_factory=list)


class Margins(BaseModel):
    """Page margins in PDF points."""

    model_config = ConfigDict(extra="forbid")

    top: float = 50
    right: float = 50
    bottom: float = 50
    left: float = 50


class Styling(BaseModel):
    """Typography of a rendered form."""

    model_config = ConfigDict(extra="forbid")

    font_family: str = "helv"
    font_size: float = 12
    line_height: float = 24
    primary_color: str = "#000000"
    secondary_color: str = "#555555"


class TemplateData(BaseModel):
    """Layout of a form template."""

    model_config = ConfigDict(extra="forbid")

    title: str
    description: str | None = None
    sections: list[FormSection] = Field(default_factory=list)
    footer: str | None = None
    page_size: PageSize = PageSize.A4
    orientation: PageOrientation = PageOrientation.PORTRAIT
    margins: Margins = Field(default_factory=Margins)
    styling: Styling = Field(default_factory=Styling)


class TemplateDraft(BaseModel):
    """Payload used to create a template."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    description: str | None = None
    document_types: list[DocumentType] = Field(default_factory=list)
    required_fields: list[str] = Field(default_factory=list)
    optional_fields: list[str] = Field(default_factory=list)
    field_mappings: dict[str, str] = Field(default_factory=dict)
    template_data: TemplateData


class TemplateUpdate(BaseModel):
    """Partial template update. Unset attributes are copied from the current version."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    status: TemplateStatus | None = None
    document_types: list[DocumentType] | None = None
    required_fields: list[str] | None = None
    optional_fields: list[str] | None = None
    field_mappings: dict[str, str] | None = None
    template_data: TemplateData | None = None


class FormTemplate(BaseModel):
    """Current state of a versioned form template."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: str | None = None
    version: int = Field(default=1, ge=1)
    status: TemplateStatus = TemplateStatus.DRAFT
    document_types: list[DocumentType]
    required_fields: list[str] = Field(default_factory=list)
    optional_fields: list[str] = Field(default_factory=list)
    field_mappings: dict[str, str] = Field(default_factory=dict)
    template_data: TemplateData
    created_by: str
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None


class FormTemplateVersion(BaseModel):
    """Immutable snapshot of one template version."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    template_id: str
    version: int = Field(ge=1)
    name: str
    description: str | None = None
    status: TemplateStatus
    document_types: list[DocumentType]
    required_fields: list[str]
    optional_fields: list[str]
    field_mappings: dict[str, str]
    template_data: TemplateData
    created_by: str
    created_at: datetime


class FormSubmission(BaseModel):
    """Rendered form pinned to one template version."""

    model_config = ConfigDict(extra="forbid")

    id: str
    template_id: str
    template_version: int = Field(ge=1)
    case_id: str
    user_id: str
    form_data: dict[str, Any] = Field(default_factory=dict)
    file_path: str
    file_name: str
    file_size: int = Field(ge=0)
    status: SubmissionStatus = SubmissionStatus.GENERATED
    submitted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class FormSignature(BaseModel):
    """Signature appended to a submission."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    submission_id: str
    user_id: str
    signature_data: str
    signature_type: SignatureType
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime


class SignatureVerification(BaseModel):
    """Outcome of a signature integrity check.

    A positive result means the signature record belongs to the submission, its payload
    is a well-formed image data URL and the signed PDF can be opened. It is not a
    cryptographic proof of the signer's identity.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    verified: bool
    reason: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
