from __future__ import annotations

from datetime import date

import pytest

from casedocs.rules import ValidationRule
from casedocs.typing.enums import DocumentType
from casedocs.typing.models import ExtractedData
from casedocs.validator import DocumentValidator, round_half_up

TODAY = date(2025, 6, 15)


def _passport(**overrides: str | None) -> ExtractedData:
    fields: dict[str, str | None] = {
        "passportNumber": "AB1234567",
        "surname": "MURPHY",
        "givenNames": "SEAN PATRICK",
        "dateOfBirth": "1985-03-15",
        "dateOfExpiry": "2030-02-01",
        "nationality": "IRISH",
    }
    fields.update(overrides)
    return ExtractedData(
        fields=fields,
        confidence={name: (90.0 if value is not None else 0.0) for name, value in fields.items()},
    )


def test_valid_passport() -> None:
    result = DocumentValidator(today=TODAY).validate(_passport(), DocumentType.PASSPORT)

    assert result.is_valid is True
    assert result.score == 100
    assert result.warnings == ()


def test_expired_passport_is_invalid() -> None:
    extracted = _passport(dateOfExpiry="2024-02-01")

    result = DocumentValidator().validate(extracted, DocumentType.PASSPORT, today=TODAY)

    assert result.is_valid is False
    assert [issue.field for issue in result.errors] == ["dateOfExpiry"]
    assert result.errors[0].message == "Passport is expired or expiry date is invalid"
    assert result.score == 83


def test_expiry_on_reference_day_is_valid() -> None:
    extracted = _passport(dateOfExpiry="2025-06-15")

    result = DocumentValidator(today=TODAY).validate(extracted, DocumentType.PASSPORT)

    assert result.is_valid is True


def test_missing_required_fields_are_errors() -> None:
    result = DocumentValidator(today=TODAY).validate(
        _passport(passportNumber=None, nationality=None),
        DocumentType.PASSPORT,
    )

    assert [issue.field for issue in result.errors] == ["passportNumber", "nationality"]
    assert result.score == 67


def test_low_confidence_only_warns() -> None:
    extracted = ExtractedData(
        fields={"documentTitle": "Letter", "date": None, "name": "JO"},
        confidence={"documentTitle": 69.5, "date": 0.0, "name": 70.0},
    )

    result = DocumentValidator(today=TODAY).validate(extracted, DocumentType.OTHER)

    assert result.is_valid is True
    assert result.score == 100
    assert [(issue.field, issue.message) for issue in result.warnings] == [
        ("documentTitle", "Low confidence (70%) for documentTitle"),
    ]


def test_invalid_optional_value_is_an_error() -> None:
    extracted = ExtractedData(fields={"date": "yesterday"}, confidence={"date": 90.0})

    result = DocumentValidator(today=TODAY).validate(extracted, DocumentType.OTHER)

    assert [issue.message for issue in result.errors] == ["Date is invalid"]


def test_recency_window() -> None:
    extracted = ExtractedData(
        fields={
            "accountHolder": "JANE DOE",
            "accountNumber": "123",
            "statementDate": "2025-03-14",
            "balance": None,
        },
        confidence={"accountHolder": 90.0, "accountNumber": 90.0, "statementDate": 90.0, "balance": 0.0},
    )

    result = DocumentValidator(today=TODAY).validate(extracted, DocumentType.FINANCIAL)

    assert [issue.field for issue in result.errors] == ["statementDate"]
    assert result.score == 75


def test_no_rules_scores_full_marks() -> None:
    rules = {kind: () for kind in DocumentType}

    result = DocumentValidator(rules, today=TODAY).validate(ExtractedData(), DocumentType.VISA)

    assert result.score == 100
    assert result.is_valid is True


def test_custom_threshold() -> None:
    rules = {kind: () for kind in DocumentType} | {
        DocumentType.OTHER: (ValidationRule(field="name", required=True, message="Name missing"),),
    }
    extracted = ExtractedData(fields={"name": "JO"}, confidence={"name": 85.0})

    validator = DocumentValidator(rules, low_confidence_threshold=90, today=TODAY)

    result = validator.validate(extracted, DocumentType.OTHER)

    assert [issue.message for issue in result.warnings] == ["Low confidence (85%) for name"]


@pytest.mark.parametrize(("value", "expected"), [(66.5, 67), (83.33, 83), (0.5, 1), (99.49, 99)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected
