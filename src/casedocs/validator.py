"""Rule-based validation of extracted fields."""

from __future__ import annotations

import math
from datetime import date
from typing import TYPE_CHECKING

from casedocs.logging import get_logger
from casedocs.rules import VALIDATION_RULES
from casedocs.typing.models import ValidationIssue, ValidationResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    from casedocs.rules import ValidationRule
    from casedocs.typing.enums import DocumentType
    from casedocs.typing.models import ExtractedData

logger = get_logger(__name__)

LOW_CONFIDENCE_THRESHOLD = 70.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return math.floor(value + 0.5)


class DocumentValidator:
    """Checks required fields, value predicates and extraction confidence."""

    def __init__(
        self,
        rules: Mapping[DocumentType, tuple[ValidationRule, ...]] = VALIDATION_RULES,
        *,
        low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
        today: date | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            rules (Mapping[DocumentType, tuple[ValidationRule, ...]]): Rules per type.
            low_confidence_threshold (float): Confidence under which a warning is raised.
            today (date | None): Fixed reference day. Defaults to the current day.
        """
        self._rules = rules
        self._threshold = low_confidence_threshold
        self._today = today

    def validate(
        self,
        extracted: ExtractedData,
        document_type: DocumentType,
        *,
        today: date | None = None,
    ) -> ValidationResult:
        """Validate extracted data against the rules of `document_type`.

        For each rule, a missing required value is an error; a present value failing the
        predicate is an error; otherwise a present value extracted below the confidence
        threshold yields a warning. Warnings never affect validity.

        Args:
            extracted (ExtractedData): Extracted fields and confidences.
            document_type (DocumentType): Type whose rules apply.
            today (date | None): Reference day overriding the validator default.

        Returns:
            ValidationResult: Errors, warnings and the passed-rule percentage.
        """
        reference = today or self._today or date.today()
        rules = self._rules.get(document_type, ())
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for rule in rules:
            value = (extracted.fields.get(rule.field) or "").strip()
            if not value:
                if rule.required:
                    errors.append(ValidationIssue(field=rule.field, message=rule.message))
                continue
            if rule.validator is not None and not rule.validator(value, reference):
                errors.append(ValidationIssue(field=rule.field, message=rule.message))
                continue
            confidence = extracted.confidence.get(rule.field, 0.0)
            if confidence < self._threshold:
                warnings.append(
                    ValidationIssue(
                        field=rule.field,
                        message=f"Low confidence ({round_half_up(confidence)}%) for {rule.field}",
                    )
                )

        score = round_half_up((len(rules) - len(errors)) / len(rules) * 100) if rules else 100
        result = ValidationResult(score=score, errors=tuple(errors), warnings=tuple(warnings))
        logger.info(
            "Document validated",
            extra={
                "document_type": document_type.value,
                "is_valid": result.is_valid,
                "score": score,
                "errors": len(errors),
                "warnings": len(warnings),
            },
        )
        return result
