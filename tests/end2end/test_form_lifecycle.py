from __future__ import annotations

from typing import TYPE_CHECKING

import fitz
import pytest

from casedocs.exceptions import SignatureError
from casedocs.forms import (
    FormGenerationService,
    SignatureService,
    SubmissionStore,
    TemplateService,
    TemplateStore,
)
from casedocs.storage import LocalBlobStorage
from casedocs.typing.enums import DocumentType, SignatureType, SubmissionStatus, TemplateStatus
from casedocs.typing.models import TemplateUpdate

if TYPE_CHECKING:
    from pathlib import Path


def test_template_to_signed_submission(tmp_path: Path, clock, make_draft, make_signature) -> None:
    storage = LocalBlobStorage(tmp_path / "blobs")
    submissions = SubmissionStore(root=tmp_path / "submissions")
    templates = TemplateService(TemplateStore(root=tmp_path / "templates"), clock=clock)
    generation = FormGenerationService(templates, submissions, storage, clock=clock)
    signatures = SignatureService(submissions, storage, clock=clock)

    draft = templates.create(make_draft(sections=3), created_by="admin")
    template = templates.activate(draft.id, updated_by="admin")
    assert templates.templates_for_document_type(DocumentType.PASSPORT) == [template]

    first = generation.generate_form(
        template.id,
        {"fullName": "Jane Doe", "passportNumber": "X1234567", "married": False},
        case_id="case-7",
        user_id="user-1",
    )
    revised = templates.update(
        template.id,
        TemplateUpdate(name="Visa Application v2"),
        updated_by="admin",
        create_new_version=True,
    )
    assert revised.version == 2
    assert first.template_version == 1
    assert templates.get_version(template.id, first.template_version).name == "Visa Application"

    signature = signatures.sign(first.id, make_signature(), SignatureType.DRAWN, user_id="user-1")
    verification = signatures.verify(first.id, signature.id)
    assert verification.verified is True

    submitted = generation.submit_form(first.id)
    assert submitted.status == SubmissionStatus.SUBMITTED
    with pytest.raises(SignatureError, match="already submitted"):
        signatures.sign(first.id, make_signature(), SignatureType.TYPED, user_id="user-1")
    assert signatures.list_signatures(first.id) == [signature]

    with fitz.open(stream=storage.read(first.file_path), filetype="pdf") as doc:
        text = "".join(page.get_text() for page in doc)
        images = doc[-1].get_images()
    assert "Jane Doe" in text
    assert "Digitally signed by: user-1" in text
    assert len(images) == 1

    second = generation.generate_form(
        template.id,
        {"fullName": "John Roe", "passportNumber": "Y7654321"},
        case_id="case-7",
        user_id="user-1",
    )
    assert second.template_version == 2
    assert second.file_name.startswith("visa-application-v2-")
    assert [item.id for item in generation.submissions_for_case("case-7")] == [second.id, first.id]

    retired = templates.deprecate(template.id)
    assert retired.status == TemplateStatus.DEPRECATED
    assert templates.templates_for_document_type(DocumentType.PASSPORT) == []
