"""Filesystem persistence of versioned form templates."""

from __future__ import annotations

import json
import os
import re
import threading
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from casedocs.exceptions import StoreError, TemplateNotFoundError
from casedocs.logging import get_logger
from casedocs.typing.models import FormTemplate, FormTemplateVersion

logger = get_logger(__name__)

_TEMPLATE_FILE_VERSION = 1
_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class TemplateStore(BaseModel):
    """One JSON envelope per template holding its current state and version history.

    The current template and its history are written in a single file replacement, so
    a reader never observes a current version without its history record.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    root: Path = Field(description="Template directory root.")
    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def model_post_init(self, __context: object, /) -> None:
        """Ensure the template directory exists after model initialization.

        Args:
            __context (object): Pydantic model context.
        """
        self.root.mkdir(parents=True, exist_ok=True)

    def template_path(self, template_id: str) -> Path:
        """Build the envelope path of a template.

        Args:
            template_id (str): Template identifier.

        Raises:
            StoreError: If the identifier contains path characters.

        Returns:
            Path: Envelope path.
        """
        if not _SAFE_ID.match(template_id):
            raise StoreError(message=f"Invalid template id: {template_id!r}")
        return self.root / f"{template_id}.template.json"

    def exists(self, template_id: str) -> bool:
        """Return whether a template is stored."""
        return self.template_path(template_id).is_file()

    def load(self, template_id: str) -> FormTemplate:
        """Load the current state of a template.

        Raises:
            TemplateNotFoundError: If no template is stored under this id.
        """
        current, _ = self._read(template_id)
        return current

    def versions(self, template_id: str) -> list[FormTemplateVersion]:
        """Load the version history of a template, oldest first.

        Raises:
            TemplateNotFoundError: If no template is stored under this id.
        """
        _, history = self._read(template_id)
        return history

    def list_templates(self) -> list[FormTemplate]:
        """Load the current state of every stored template, oldest first."""
        templates: list[FormTemplate] = []
        for path in sorted(self.root.glob("*.template.json")):
            current, _ = _parse_envelope(path)
            templates.append(current)
        return sorted(templates, key=lambda template: template.created_at)

    def commit(
        self,
        template: FormTemplate,
        record: FormTemplateVersion,
        *,
        replace_record: bool = False,
    ) -> Path:
        """Write a template state and its version record in one file replacement.

        Args:
            template (FormTemplate): New current state.
            record (FormTemplateVersion): History record of `template.version`.
            replace_record (bool): Allow rewriting an existing record of the same version.

        Raises:
            StoreError: If the record does not describe `template`, or would rewrite an
                existing version without `replace_record`.

        Returns:
            Path: Written envelope path.
        """
        if record.template_id != template.id or record.version != template.version:
            raise StoreError(
                message=(
                    f"Version record {record.template_id}@{record.version} "
                    f"does not match template {template.id}@{template.version}"
                )
            )

        path = self.template_path(template.id)
        with self._lock:
            history = _parse_envelope(path)[1] if path.is_file() else []
            kept = [item for item in history if item.version != record.version]
            if len(kept) != len(history) and not replace_record:
                raise StoreError(message=f"Version {record.version} of template {template.id} already exists")
            history = sorted([*kept, record], key=lambda item: item.version)

            envelope = {
                "template_file_version": _TEMPLATE_FILE_VERSION,
                "current": template.model_dump(mode="json"),
                "versions": [item.model_dump(mode="json") for item in history],
            }
            write_json_atomic(path, envelope)

        logger.info(
            "Template stored",
            extra={"template_id": template.id, "version": template.version, "status": template.status.value},
        )
        return path

    def _read(self, template_id: str) -> tuple[FormTemplate, list[FormTemplateVersion]]:
        path = self.template_path(template_id)
        if not path.is_file():
            raise TemplateNotFoundError(template_id=template_id)
        return _parse_envelope(path)


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    """Write JSON next to `path` and move it in place.

    Args:
        path (Path): Destination file.
        payload (dict[str, Any]): JSON-serializable object.
    """
    tmp_path = path.with_name(f"{path.name}.tmp")
    tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    os.replace(tmp_path, path)


def _parse_envelope(path: Path) -> tuple[FormTemplate, list[FormTemplateVersion]]:
    """Decode a template envelope.

    Args:
        path (Path): Envelope path.

    Raises:
        StoreError: If the file is not a supported template envelope.

    Returns:
        tuple[FormTemplate, list[FormTemplateVersion]]: Current state and history.
    """
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise StoreError(message=f"Cannot read template file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise StoreError(message=f"Template file must hold a JSON object: {path}")

    envelope = cast("dict[str, Any]", payload)
    file_version = envelope.get("template_file_version")
    if file_version != _TEMPLATE_FILE_VERSION:
        raise StoreError(message=f"Unsupported template file version {file_version!r}: {path}")
    try:
        current = FormTemplate.model_validate(envelope.get("current"))
        history = [FormTemplateVersion.model_validate(item) for item in envelope.get("versions") or []]
    except ValidationError as exc:
        raise StoreError(message=f"Invalid template file {path}: {exc}") from exc
    return current, history
