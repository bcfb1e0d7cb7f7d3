"""Form generation, preview and submission."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from casedocs.exceptions import FormGenerationError, SubmissionStateError
from casedocs.forms.render import PREVIEW_WATERMARK, render_form
from casedocs.logging import get_logger
from casedocs.typing.enums import SubmissionStatus, TemplateStatus
from casedocs.typing.models import FormSubmission

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from casedocs.forms.submission_store import SubmissionStore
    from casedocs.forms.templates import TemplateService
    from casedocs.typing.protocol import BlobStorage

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def form_file_name(template_name: str, generated_at: datetime) -> str:
    """Build `<slug>-<timestamp>.pdf` from a template name.

    Args:
        template_name (str): Template name.
        generated_at (datetime): Generation time.

    Returns:
        str: File name without path characters.
    """
    slug = re.sub(r"[^a-z0-9._-]+", "-", template_name.lower()).strip("-") or "form"
    timestamp = re.sub(r"[:.+]", "-", generated_at.isoformat())
    return f"{slug}-{timestamp}.pdf"


class FormGenerationService:
    """Renders forms from active templates and tracks the resulting submissions."""

    def __init__(
        self,
        templates: TemplateService,
        submissions: SubmissionStore,
        storage: BlobStorage,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._templates = templates
        self._submissions = submissions
        self._storage = storage
        self._clock = clock

    def generate_form(
        self,
        template_id: str,
        form_data: Mapping[str, Any],
        *,
        case_id: str,
        user_id: str,
    ) -> FormSubmission:
        """Render a form and record a submission pinned to the template version.

        The PDF is stored at `forms/<case_id>/<file name>`. Nothing is stored when the
        template is not active or a required value is missing.

        Args:
            template_id (str): Template identifier.
            form_data (Mapping[str, Any]): Field values keyed by field id.
            case_id (str): Case the form belongs to.
            user_id (str): Requesting user.

        Raises:
            TemplateNotFoundError: If the template does not exist.
            FormGenerationError: If the template is not active, required values are
                missing or rendering fails.

        Returns:
            FormSubmission: New `generated` submission.
        """
        template = self._templates.get(template_id)
        if template.status != TemplateStatus.ACTIVE:
            raise FormGenerationError(message=f"Template with ID {template_id} is not active")

        pdf_bytes = render_form(template.template_data, form_data, required_fields=template.required_fields)

        now = self._clock()
        file_name = form_file_name(template.name, now)
        file_path = self._storage.write(f"forms/{case_id}/{file_name}", pdf_bytes)
        submission = self._submissions.create(
            FormSubmission(
                id=str(uuid4()),
                template_id=template.id,
                template_version=template.version,
                case_id=case_id,
                user_id=user_id,
                form_data=dict(form_data),
                file_path=file_path,
                file_name=file_name,
                file_size=len(pdf_bytes),
                status=SubmissionStatus.GENERATED,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(
            "Form generated",
            extra={
                "submission_id": submission.id,
                "template_id": template.id,
                "template_version": template.version,
                "case_id": case_id,
            },
        )
        return submission

    def preview_form(self, template_id: str, form_data: Mapping[str, Any]) -> bytes:
        """Render a watermarked preview without storing anything.

        Required values are not enforced and the template may be in any status.

        Args:
            template_id (str): Template identifier.
            form_data (Mapping[str, Any]): Field values keyed by field id.

        Raises:
            TemplateNotFoundError: If the template does not exist.
            FormGenerationError: If rendering fails.

        Returns:
            bytes: PDF preview.
        """
        template = self._templates.get(template_id)
        stamp = f"Generated: {self._clock().isoformat()}"
        return render_form(template.template_data, form_data, watermark=PREVIEW_WATERMARK, stamp=stamp)

    def submit_form(self, submission_id: str) -> FormSubmission:
        """Move a submission from `generated` to `submitted`.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
            SubmissionStateError: If the submission is not `generated`.
        """
        submission = self._submissions.get(submission_id)
        if submission.status != SubmissionStatus.GENERATED:
            raise SubmissionStateError(
                reason=f"Submission with ID {submission_id} is already {submission.status.value}"
            )
        now = self._clock()
        submitted = submission.model_copy(
            update={"status": SubmissionStatus.SUBMITTED, "submitted_at": now, "updated_at": now}
        )
        self._submissions.save(submitted)
        logger.info("Form submitted", extra={"submission_id": submission_id})
        return submitted

    def get_submission(self, submission_id: str) -> FormSubmission:
        """Return a submission by id."""
        return self._submissions.get(submission_id)

    def submissions_for_case(self, case_id: str) -> list[FormSubmission]:
        """Return the submissions of a case, newest first."""
        return self._submissions.list_submissions(case_id=case_id)
