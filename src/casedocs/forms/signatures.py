"""Signing form submissions and checking signature integrity."""

from __future__ import annotations

import base64
import binascii
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

try:
    import fitz
except Exception:  # pragma: no cover - optional dependency at runtime
    fitz: Any
    fitz = None

from casedocs.exceptions import SignatureError, StoreError, SubmissionNotFoundError
from casedocs.logging import get_logger
from casedocs.typing.enums import SubmissionStatus
from casedocs.typing.models import FormSignature, SignatureVerification

if TYPE_CHECKING:
    from collections.abc import Callable

    from casedocs.forms.submission_store import SubmissionStore
    from casedocs.typing.enums import SignatureType
    from casedocs.typing.models import FormSubmission
    from casedocs.typing.protocol import BlobStorage

logger = get_logger(__name__)

SIGNATURE_WIDTH = 150.0
SIGNATURE_HEIGHT = 50.0
SIGNATURE_RIGHT_OFFSET = 50.0
SIGNATURE_BOTTOM_OFFSET = 100.0

_DATA_URL = re.compile(r"^data:image/(png|jpeg);base64,([A-Za-z0-9+/\s]+={0,2})$")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def decode_signature_data(signature_data: str) -> tuple[str, bytes]:
    """Decode a PNG or JPEG base64 data URL.

    Args:
        signature_data (str): `data:image/png;base64,...` or `data:image/jpeg;base64,...`.

    Raises:
        SignatureError: If the payload is not such a data URL.

    Returns:
        tuple[str, bytes]: Image format (`png` or `jpeg`) and image bytes.
    """
    match = _DATA_URL.match(signature_data.strip())
    if match is None:
        raise SignatureError(reason="Invalid signature data format")
    try:
        image_bytes = base64.b64decode(re.sub(r"\s+", "", match.group(2)), validate=True)
    except binascii.Error as exc:
        raise SignatureError(reason="Invalid signature data format") from exc
    if not image_bytes:
        raise SignatureError(reason="Invalid signature data format")
    return match.group(1), image_bytes


def embed_signature(pdf_bytes: bytes, image_bytes: bytes, *, signer: str, signed_at: datetime) -> bytes:
    """Stamp a signature image on the last page of a PDF.

    The image sits at a fixed offset from the bottom-right corner, with a
    "Digitally signed by" label above it and the ISO-8601 signing time below it.

    Args:
        pdf_bytes (bytes): Rendered form.
        image_bytes (bytes): PNG or JPEG signature image.
        signer (str): Signer identifier printed in the label.
        signed_at (datetime): Signing time.

    Raises:
        SignatureError: If PyMuPDF is unavailable, or the PDF or image cannot be used.

    Returns:
        bytes: Signed PDF.
    """
    if fitz is None:
        raise SignatureError(reason="PyMuPDF is required to sign forms")
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as exc:
        raise SignatureError(reason=f"Stored form PDF cannot be opened: {exc}") from exc

    try:
        if len(doc) == 0:
            raise SignatureError(reason="Stored form PDF has no page")
        page = doc[-1]
        width, height = page.rect.width, page.rect.height
        x0 = width - SIGNATURE_WIDTH - SIGNATURE_RIGHT_OFFSET
        y1 = height - SIGNATURE_BOTTOM_OFFSET
        rect = fitz.Rect(x0, y1 - SIGNATURE_HEIGHT, x0 + SIGNATURE_WIDTH, y1)
        page.insert_image(rect, stream=image_bytes)
        page.insert_text((x0, rect.y0 - 10), f"Digitally signed by: {signer}", fontsize=10)
        page.insert_text((x0, y1 + 15), f"Date: {signed_at.isoformat()}", fontsize=8)
        return doc.tobytes()
    except SignatureError:
        raise
    except Exception as exc:
        raise SignatureError(reason=f"Signature image cannot be embedded: {exc}") from exc
    finally:
        doc.close()


class SignatureService:
    """Signs generated form submissions.

    Verification is an integrity and format check of the stored records and PDF. It
    is not a cryptographic proof of the signer's identity.
    """

    def __init__(
        self,
        submissions: SubmissionStore,
        storage: BlobStorage,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._submissions = submissions
        self._storage = storage
        self._clock = clock

    def sign(
        self,
        submission_id: str,
        signature_data: str,
        signature_type: SignatureType,
        *,
        user_id: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> FormSignature:
        """Sign a `generated` submission and stamp its stored PDF.

        The signed PDF is built before anything is persisted, so a rejected request
        leaves neither a signature record nor a modified PDF.

        Args:
            submission_id (str): Submission identifier.
            signature_data (str): PNG or JPEG base64 data URL.
            signature_type (SignatureType): How the signature was produced.
            user_id (str): Signer identifier.
            ip_address (str | None): Signer IP address.
            user_agent (str | None): Signer user agent.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
            SignatureError: If the submission is not `generated`, the payload is
                malformed or the PDF cannot be signed.

        Returns:
            FormSignature: Persisted signature.
        """
        submission = self._submissions.get(submission_id)
        if submission.status != SubmissionStatus.GENERATED:
            raise SignatureError(reason=f"Cannot sign a form that is already {submission.status.value}")

        _, image_bytes = decode_signature_data(signature_data)
        now = self._clock()
        try:
            pdf_bytes = self._storage.read(submission.file_path)
        except StoreError as exc:
            raise SignatureError(reason=f"Failed to retrieve PDF file: {exc}") from exc
        signed_pdf = embed_signature(pdf_bytes, image_bytes, signer=user_id, signed_at=now)

        signature = self._submissions.add_signature(
            FormSignature(
                id=str(uuid4()),
                submission_id=submission.id,
                user_id=user_id,
                signature_data=signature_data,
                signature_type=signature_type,
                ip_address=ip_address,
                user_agent=user_agent,
                created_at=now,
            )
        )
        self._storage.write(submission.file_path, signed_pdf, overwrite=True)
        signed = submission.model_copy(update={"file_size": len(signed_pdf), "updated_at": now})
        self._submissions.save(signed)
        logger.info(
            "Form signed",
            extra={
                "submission_id": submission.id,
                "signature_id": signature.id,
                "type": signature_type.value,
            },
        )
        return signature

    def list_signatures(self, submission_id: str) -> list[FormSignature]:
        """Return the signatures of a submission, oldest first."""
        return self._submissions.signatures(submission_id)

    def verify(self, submission_id: str, signature_id: str) -> SignatureVerification:
        """Check that a signature belongs to a submission whose PDF is intact.

        Every failure yields `verified=False` with a reason; nothing is raised.

        Args:
            submission_id (str): Submission identifier.
            signature_id (str): Signature identifier.

        Returns:
            SignatureVerification: Verdict, reason and signature details.
        """
        try:
            submission = self._submissions.get(submission_id)
        except SubmissionNotFoundError:
            reason = f"Submission with ID {submission_id} not found"
            return SignatureVerification(verified=False, reason=reason)
        except StoreError as exc:
            logger.warning("Submission unreadable", extra={"submission_id": submission_id, "error": str(exc)})
            reason = f"Submission with ID {submission_id} cannot be read"
            return SignatureVerification(verified=False, reason=reason)

        try:
            signature = self._submissions.find_signature(signature_id)
        except StoreError as exc:
            logger.warning("Signature lookup failed", extra={"signature_id": signature_id, "error": str(exc)})
            return SignatureVerification(verified=False, reason="Failed to read signature records")
        if signature is None:
            return SignatureVerification(verified=False, reason=f"Signature with ID {signature_id} not found")
        if signature.submission_id != submission.id:
            return SignatureVerification(
                verified=False,
                reason="Signature does not belong to the specified submission",
            )

        details = _details(signature, submission)
        reason = self._integrity_problem(signature, submission)
        verified = reason is None
        logger.info(
            "Signature verified",
            extra={"submission_id": submission_id, "signature_id": signature_id, "verified": verified},
        )
        return SignatureVerification(verified=verified, reason=reason, details=details)

    def _integrity_problem(self, signature: FormSignature, submission: FormSubmission) -> str | None:
        try:
            pdf_bytes = self._storage.read(submission.file_path)
        except StoreError:
            return "Failed to retrieve PDF file"
        if fitz is None:
            return "PyMuPDF is required to verify signatures"
        try:
            with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
                if len(doc) == 0:
                    return "Signed PDF has no page"
        except Exception:  # noqa: BLE001
            return "Signed PDF cannot be opened"
        try:
            decode_signature_data(signature.signature_data)
        except SignatureError:
            return "Invalid signature data format"
        return None


def _details(signature: FormSignature, submission: FormSubmission) -> dict[str, Any]:
    return {
        "signature_id": signature.id,
        "submission_id": submission.id,
        "signature_type": signature.signature_type.value,
        "signed_by": signature.user_id,
        "signed_at": signature.created_at.isoformat(),
        "ip_address": signature.ip_address,
        "user_agent": signature.user_agent,
    }
