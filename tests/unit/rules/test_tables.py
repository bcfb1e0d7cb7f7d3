from __future__ import annotations

import pytest

from casedocs.rules import (
    DEFAULT_RULES,
    EXTRACTION_RULES,
    KEYWORDS,
    VALIDATION_RULES,
    RuleBook,
    ensure_complete,
)
from casedocs.typing.enums import DocumentType


@pytest.mark.parametrize("table", [KEYWORDS, EXTRACTION_RULES, VALIDATION_RULES])
def test_tables_cover_every_document_type(table: object) -> None:
    ensure_complete(table, "table")  # type: ignore[arg-type]


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        KEYWORDS[DocumentType.OTHER] = ("x",)  # type: ignore[index]


def test_other_type_has_no_keywords() -> None:
    assert KEYWORDS[DocumentType.OTHER] == ()


def test_validated_fields_are_extracted() -> None:
    for document_type in DocumentType:
        extracted = {rule.field for rule in EXTRACTION_RULES[document_type]}
        validated = {rule.field for rule in VALIDATION_RULES[document_type]}
        assert validated <= extracted, document_type


def test_extraction_field_names_are_unique_per_type() -> None:
    for document_type in DocumentType:
        fields = [rule.field for rule in EXTRACTION_RULES[document_type]]
        assert len(fields) == len(set(fields)), document_type


def test_rule_book_rejects_incomplete_table() -> None:
    partial = {DocumentType.PASSPORT: ("passport",)}

    with pytest.raises(ValueError, match="Rule table 'keywords' has no entry for: visa"):
        RuleBook(keywords=partial, extraction=EXTRACTION_RULES, validation=VALIDATION_RULES)


def test_default_rule_book() -> None:
    assert DEFAULT_RULES.keywords is KEYWORDS
