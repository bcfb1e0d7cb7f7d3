"""Form template lifecycle: creation, versioning, activation and validation."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from casedocs.exceptions import TemplateNotFoundError, TemplateStateError, TemplateValidationError
from casedocs.logging import get_logger
from casedocs.typing.enums import TemplateStatus
from casedocs.typing.models import FormTemplate, FormTemplateVersion

if TYPE_CHECKING:
    from collections.abc import Callable

    from casedocs.forms.template_store import TemplateStore
    from casedocs.typing.enums import DocumentType
    from casedocs.typing.models import TemplateData, TemplateDraft, TemplateUpdate

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def validate_template(
    *,
    name: str | None,
    document_types: list[DocumentType],
    required_fields: list[str],
    optional_fields: list[str],
    field_mappings: dict[str, str],
    template_data: TemplateData,
) -> None:
    """Reject a structurally invalid template.

    Args:
        name (str | None): Template name.
        document_types (list[DocumentType]): Accepted document types.
        required_fields (list[str]): Fields that must be supplied.
        optional_fields (list[str]): Fields that may be supplied.
        field_mappings (dict[str, str]): Label of every declared field.
        template_data (TemplateData): Layout.

    Raises:
        TemplateValidationError: On the first structural problem found.
    """
    if not name or not name.strip():
        raise TemplateValidationError(message="Template name is required")
    if not document_types:
        raise TemplateValidationError(message="At least one document type is required")
    if not template_data.title.strip():
        raise TemplateValidationError(message="Template title is required")
    if not template_data.sections:
        raise TemplateValidationError(message="At least one template section is required")

    for index, section in enumerate(template_data.sections, start=1):
        if not section.fields:
            raise TemplateValidationError(message=f"Section {index} must have at least one field")
        for field_index, field in enumerate(section.fields, start=1):
            for attribute in ("id", "type", "label"):
                if not getattr(field, attribute):
                    raise TemplateValidationError(
                        message=f"Field {field_index} in section {index} must have a {attribute}"
                    )

    for kind, names in (("required", required_fields), ("optional", optional_fields)):
        for field_name in names:
            if not field_mappings.get(field_name):
                raise TemplateValidationError(
                    message=f"Field mapping for {kind} field '{field_name}' is missing"
                )

    declared = set(required_fields) | set(optional_fields)
    unmapped = sorted(set(field_mappings) - declared)
    if unmapped:
        raise TemplateValidationError(
            message=f"Field mappings reference undeclared fields: {', '.join(unmapped)}"
        )


def _validate(template: FormTemplate) -> None:
    validate_template(
        name=template.name,
        document_types=template.document_types,
        required_fields=template.required_fields,
        optional_fields=template.optional_fields,
        field_mappings=template.field_mappings,
        template_data=template.template_data,
    )


def _article(status: TemplateStatus) -> str:
    return f"an {status.value}" if status.value[0] in "aeiou" else f"a {status.value}"


def _snapshot(template: FormTemplate, *, created_by: str, created_at: datetime) -> FormTemplateVersion:
    return FormTemplateVersion(
        id=str(uuid4()),
        template_id=template.id,
        version=template.version,
        name=template.name,
        description=template.description,
        status=template.status,
        document_types=list(template.document_types),
        required_fields=list(template.required_fields),
        optional_fields=list(template.optional_fields),
        field_mappings=dict(template.field_mappings),
        template_data=template.template_data.model_copy(deep=True),
        created_by=created_by,
        created_at=created_at,
    )


class TemplateService:
    """Versioned form template management.

    Editing an active template in place is refused except to deprecate it; any other
    change goes through a new version so that a submission's pinned version always
    resolves to the layout it was rendered from.
    """

    def __init__(self, store: TemplateStore, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    def create(self, draft: TemplateDraft, *, created_by: str) -> FormTemplate:
        """Create a draft template at version 1.

        Args:
            draft (TemplateDraft): Template content.
            created_by (str): Author identifier.

        Raises:
            TemplateValidationError: If the template is structurally invalid.

        Returns:
            FormTemplate: Stored template.
        """
        now = self._clock()
        template = FormTemplate(
            id=str(uuid4()),
            name=draft.name,
            description=draft.description,
            version=1,
            status=TemplateStatus.DRAFT,
            document_types=list(draft.document_types),
            required_fields=list(draft.required_fields),
            optional_fields=list(draft.optional_fields),
            field_mappings=dict(draft.field_mappings),
            template_data=draft.template_data,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        _validate(template)
        self._store.commit(template, _snapshot(template, created_by=created_by, created_at=now))
        logger.info("Template created", extra={"template_id": template.id, "name": template.name})
        return template

    def get(self, template_id: str) -> FormTemplate:
        """Return the current state of a template.

        Raises:
            TemplateNotFoundError: If the template does not exist.
        """
        return self._store.load(template_id)

    def update(
        self,
        template_id: str,
        changes: TemplateUpdate,
        *,
        updated_by: str,
        create_new_version: bool = False,
    ) -> FormTemplate:
        """Apply changes in place or as a new version.

        Unset attributes of `changes` keep their current value. A new version increments
        `version` by one and leaves the previous history record untouched. Only drafts
        are edited in place; an active or deprecated template accepts nothing in place
        but a bare deprecation.

        Args:
            template_id (str): Template identifier.
            changes (TemplateUpdate): Partial update.
            updated_by (str): Editor identifier.
            create_new_version (bool): Write the result as the next version.

        Raises:
            TemplateNotFoundError: If the template does not exist.
            TemplateStateError: If a published template would be edited in place.
            TemplateValidationError: If the result is structurally invalid.

        Returns:
            FormTemplate: New current state.
        """
        current = self._store.load(template_id)
        update = changes.model_dump(exclude_unset=True, exclude_none=True)
        if current.status != TemplateStatus.DRAFT and not create_new_version:
            # Version records of published templates are pinned; only the status may move in place.
            if update == {"status": TemplateStatus.DEPRECATED}:
                return self.deprecate(template_id, updated_by=updated_by)
            raise TemplateStateError(
                message=f"Cannot update {_article(current.status)} template without creating a new version"
            )

        now = self._clock()
        if create_new_version:
            update["version"] = current.version + 1
        status = update.get("status", current.status)
        if status == TemplateStatus.ACTIVE and current.status != TemplateStatus.ACTIVE:
            update["published_at"] = now
        update["updated_at"] = now

        updated = FormTemplate.model_validate({**current.model_dump(), **update})
        _validate(updated)
        self._store.commit(
            updated,
            _snapshot(updated, created_by=updated_by, created_at=now),
            replace_record=not create_new_version,
        )
        logger.info(
            "Template updated",
            extra={
                "template_id": template_id,
                "version": updated.version,
                "status": updated.status.value,
                "new_version": create_new_version,
            },
        )
        return updated

    def activate(self, template_id: str, *, updated_by: str = "system") -> FormTemplate:
        """Make a template active. An already active template is returned unchanged."""
        current = self._store.load(template_id)
        if current.status == TemplateStatus.ACTIVE:
            return current
        return self._set_status(current, TemplateStatus.ACTIVE, updated_by)

    def deprecate(self, template_id: str, *, updated_by: str = "system") -> FormTemplate:
        """Retire a template. An already deprecated template is returned unchanged."""
        current = self._store.load(template_id)
        if current.status == TemplateStatus.DEPRECATED:
            return current
        return self._set_status(current, TemplateStatus.DEPRECATED, updated_by)

    def _set_status(self, current: FormTemplate, status: TemplateStatus, updated_by: str) -> FormTemplate:
        now = self._clock()
        update: dict[str, object] = {"status": status, "updated_at": now}
        if status == TemplateStatus.ACTIVE:
            update["published_at"] = now
        updated = current.model_copy(update=update)
        self._store.commit(
            updated,
            _snapshot(updated, created_by=updated_by, created_at=now),
            replace_record=True,
        )
        logger.info(
            "Template status changed",
            extra={"template_id": updated.id, "version": updated.version, "status": status.value},
        )
        return updated

    def list_templates(
        self,
        *,
        status: TemplateStatus | None = None,
        document_type: DocumentType | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[FormTemplate]:
        """List templates matching the filters, oldest first.

        Args:
            status (TemplateStatus | None): Keep templates in this status.
            document_type (DocumentType | None): Keep templates accepting this type.
            limit (int | None): Maximum number of templates returned.
            offset (int): Number of matching templates skipped.

        Returns:
            list[FormTemplate]: Matching templates.
        """
        templates = [
            template
            for template in self._store.list_templates()
            if (status is None or template.status == status)
            and (document_type is None or document_type in template.document_types)
        ]
        end = None if limit is None else offset + limit
        return templates[offset:end]

    def templates_for_document_type(self, document_type: DocumentType) -> list[FormTemplate]:
        """Return the active templates accepting a document type."""
        return self.list_templates(status=TemplateStatus.ACTIVE, document_type=document_type)

    def get_versions(self, template_id: str) -> list[FormTemplateVersion]:
        """Return the version history of a template, newest first."""
        return sorted(self._store.versions(template_id), key=lambda item: item.version, reverse=True)

    def get_version(self, template_id: str, version: int) -> FormTemplateVersion:
        """Return one version of a template.

        Raises:
            TemplateNotFoundError: If the template or the version does not exist.
        """
        for record in self._store.versions(template_id):
            if record.version == version:
                return record
        raise TemplateNotFoundError(template_id=template_id, version=version)
