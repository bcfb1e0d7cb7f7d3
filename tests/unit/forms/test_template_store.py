from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from casedocs.exceptions import StoreError, TemplateNotFoundError
from casedocs.forms.template_store import TemplateStore
from casedocs.typing.enums import TemplateStatus
from casedocs.typing.models import FormTemplate, FormTemplateVersion

if TYPE_CHECKING:
    from pathlib import Path

NOW = datetime(2025, 6, 15, tzinfo=UTC)


def _template(draft, *, template_id: str = "tpl-1", version: int = 1, **overrides: object) -> FormTemplate:
    values = {
        "id": template_id,
        "name": draft.name,
        "version": version,
        "document_types": draft.document_types,
        "required_fields": draft.required_fields,
        "optional_fields": draft.optional_fields,
        "field_mappings": draft.field_mappings,
        "template_data": draft.template_data,
        "created_by": "admin",
        "created_at": NOW,
        "updated_at": NOW,
    }
    values.update(overrides)
    return FormTemplate(**values)


def _record(template: FormTemplate) -> FormTemplateVersion:
    return FormTemplateVersion(
        id=f"{template.id}-v{template.version}",
        template_id=template.id,
        version=template.version,
        name=template.name,
        status=template.status,
        document_types=template.document_types,
        required_fields=template.required_fields,
        optional_fields=template.optional_fields,
        field_mappings=template.field_mappings,
        template_data=template.template_data,
        created_by="admin",
        created_at=NOW,
    )


def test_commit_then_load(tmp_path: Path, make_draft) -> None:
    store = TemplateStore(root=tmp_path / "templates")
    template = _template(make_draft())

    path = store.commit(template, _record(template))

    assert path == tmp_path / "templates" / "tpl-1.template.json"
    assert store.exists("tpl-1") is True
    assert store.load("tpl-1") == template
    assert [record.version for record in store.versions("tpl-1")] == [1]
    envelope = json.loads(path.read_text(encoding="utf-8"))
    assert envelope["template_file_version"] == 1


def test_history_accumulates_versions(tmp_path: Path, make_draft) -> None:
    store = TemplateStore(root=tmp_path)
    first = _template(make_draft())
    second = _template(make_draft(), version=2, name="Renamed")
    store.commit(first, _record(first))

    store.commit(second, _record(second))

    assert store.load("tpl-1").name == "Renamed"
    assert [(record.version, record.name) for record in store.versions("tpl-1")] == [
        (1, "Visa Application"),
        (2, "Renamed"),
    ]


def test_duplicate_version_requires_replace(tmp_path: Path, make_draft) -> None:
    store = TemplateStore(root=tmp_path)
    template = _template(make_draft())
    store.commit(template, _record(template))
    active = template.model_copy(update={"status": TemplateStatus.ACTIVE})

    with pytest.raises(StoreError, match="Version 1 of template tpl-1 already exists"):
        store.commit(active, _record(active))

    store.commit(active, _record(active), replace_record=True)
    assert [record.status for record in store.versions("tpl-1")] == [TemplateStatus.ACTIVE]


def test_record_must_describe_template(tmp_path: Path, make_draft) -> None:
    store = TemplateStore(root=tmp_path)
    template = _template(make_draft())
    other = _template(make_draft(), version=2)

    with pytest.raises(StoreError, match="does not match"):
        store.commit(template, _record(other))


def test_missing_template(tmp_path: Path) -> None:
    store = TemplateStore(root=tmp_path)

    assert store.exists("nope") is False
    with pytest.raises(TemplateNotFoundError):
        store.load("nope")


@pytest.mark.parametrize("template_id", ["../evil", "a/b", "", "x.y"])
def test_unsafe_ids_are_rejected(tmp_path: Path, template_id: str) -> None:
    with pytest.raises(StoreError, match="Invalid template id"):
        TemplateStore(root=tmp_path).template_path(template_id)


def test_list_templates_oldest_first(tmp_path: Path, make_draft) -> None:
    store = TemplateStore(root=tmp_path)
    newer = _template(make_draft(), template_id="a-newer", created_at=NOW.replace(day=16))
    older = _template(make_draft(), template_id="z-older")
    store.commit(newer, _record(newer))
    store.commit(older, _record(older))

    assert [template.id for template in store.list_templates()] == ["z-older", "a-newer"]


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ("not json", "Cannot read template file"),
        ("[]", "must hold a JSON object"),
        ('{"template_file_version": 99}', "Unsupported template file version"),
        ('{"template_file_version": 1, "current": {}}', "Invalid template file"),
    ],
)
def test_corrupt_envelopes(tmp_path: Path, payload: str, message: str) -> None:
    store = TemplateStore(root=tmp_path)
    store.template_path("bad").write_text(payload, encoding="utf-8")

    with pytest.raises(StoreError, match=message):
        store.load("bad")
