"""Filesystem persistence of form submissions and their signatures."""

from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from casedocs.exceptions import StoreError, SubmissionNotFoundError
from casedocs.forms.template_store import write_json_atomic
from casedocs.logging import get_logger
from casedocs.typing.models import FormSignature, FormSubmission

logger = get_logger(__name__)

_SUBMISSION_FILE_VERSION = 1
_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class SubmissionStore(BaseModel):
    """One JSON envelope per submission holding the submission and its signatures."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    root: Path = Field(description="Submission directory root.")
    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def model_post_init(self, __context: object, /) -> None:
        """Ensure the submission directory exists after model initialization.

        Args:
            __context (object): Pydantic model context.
        """
        self.root.mkdir(parents=True, exist_ok=True)

    def submission_path(self, submission_id: str) -> Path:
        """Build the envelope path of a submission.

        Raises:
            StoreError: If the identifier contains path characters.
        """
        if not _SAFE_ID.match(submission_id):
            raise StoreError(message=f"Invalid submission id: {submission_id!r}")
        return self.root / f"{submission_id}.submission.json"

    def create(self, submission: FormSubmission) -> FormSubmission:
        """Persist a new submission.

        Raises:
            StoreError: If a submission with the same id exists.
        """
        path = self.submission_path(submission.id)
        with self._lock:
            if path.exists():
                raise StoreError(message=f"Submission already exists: {submission.id}")
            _write(path, submission, [])
        return submission

    def get(self, submission_id: str) -> FormSubmission:
        """Load a submission.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
        """
        submission, _ = self._read(submission_id)
        return submission

    def save(self, submission: FormSubmission) -> FormSubmission:
        """Replace the stored state of an existing submission, keeping its signatures.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
        """
        with self._lock:
            _, signatures = self._read(submission.id)
            _write(self.submission_path(submission.id), submission, signatures)
        return submission

    def add_signature(self, signature: FormSignature) -> FormSignature:
        """Append a signature to its submission.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
        """
        with self._lock:
            submission, signatures = self._read(signature.submission_id)
            _write(self.submission_path(submission.id), submission, [*signatures, signature])
        logger.info(
            "Signature stored",
            extra={"submission_id": signature.submission_id, "signature_id": signature.id},
        )
        return signature

    def signatures(self, submission_id: str) -> list[FormSignature]:
        """Return the signatures of a submission, oldest first.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
        """
        _, signatures = self._read(submission_id)
        return signatures

    def list_submissions(self, *, case_id: str | None = None) -> list[FormSubmission]:
        """Return stored submissions, newest first, optionally for one case."""
        submissions = [_parse_envelope(path)[0] for path in self.root.glob("*.submission.json")]
        matching = [item for item in submissions if case_id is None or item.case_id == case_id]
        return sorted(matching, key=lambda item: item.created_at, reverse=True)

    def find_signature(self, signature_id: str) -> FormSignature | None:
        """Look a signature up by id across all submissions."""
        for path in sorted(self.root.glob("*.submission.json")):
            _, signatures = _parse_envelope(path)
            for signature in signatures:
                if signature.id == signature_id:
                    return signature
        return None

    def _read(self, submission_id: str) -> tuple[FormSubmission, list[FormSignature]]:
        path = self.submission_path(submission_id)
        if not path.is_file():
            raise SubmissionNotFoundError(submission_id=submission_id)
        return _parse_envelope(path)


def _write(path: Path, submission: FormSubmission, signatures: list[FormSignature]) -> None:
    write_json_atomic(
        path,
        {
            "submission_file_version": _SUBMISSION_FILE_VERSION,
            "submission": submission.model_dump(mode="json"),
            "signatures": [signature.model_dump(mode="json") for signature in signatures],
        },
    )


def _parse_envelope(path: Path) -> tuple[FormSubmission, list[FormSignature]]:
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise StoreError(message=f"Cannot read submission file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise StoreError(message=f"Submission file must hold a JSON object: {path}")

    envelope = cast("dict[str, Any]", payload)
    file_version = envelope.get("submission_file_version")
    if file_version != _SUBMISSION_FILE_VERSION:
        raise StoreError(message=f"Unsupported submission file version {file_version!r}: {path}")
    try:
        submission = FormSubmission.model_validate(envelope.get("submission"))
        signatures = [FormSignature.model_validate(item) for item in envelope.get("signatures") or []]
    except ValidationError as exc:
        raise StoreError(message=f"Invalid submission file {path}: {exc}") from exc
    return submission, signatures
