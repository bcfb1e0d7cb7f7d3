"""Regex field extraction with word-level confidence."""

from __future__ import annotations

from typing import TYPE_CHECKING

from casedocs.logging import get_logger
from casedocs.processing.spans import WordSpanIndex
from casedocs.rules import EXTRACTION_RULES
from casedocs.typing.models import ExtractedData

if TYPE_CHECKING:
    from collections.abc import Mapping

    from casedocs.rules import ExtractionRule
    from casedocs.typing.enums import DocumentType
    from casedocs.typing.models import RecognitionResult

logger = get_logger(__name__)


class FieldExtractor:
    """Applies the extraction rules of one document type to recognized text."""

    def __init__(self, rules: Mapping[DocumentType, tuple[ExtractionRule, ...]] = EXTRACTION_RULES) -> None:
        self._rules = rules

    def extract(self, recognition: RecognitionResult, document_type: DocumentType) -> ExtractedData:
        """Extract the fields of `document_type`.

        Rules are independent: each searches the whole text. The first capture group is
        trimmed and post-processed. The field confidence is the mean confidence of the
        recognized words starting inside the matched span, or 0 without word geometry.
        A missing or empty value is stored as None with confidence 0.

        Args:
            recognition (RecognitionResult): Recognized text and words.
            document_type (DocumentType): Type whose rules apply.

        Returns:
            ExtractedData: One entry per rule field.
        """
        index = WordSpanIndex.from_recognition(recognition)
        fields: dict[str, str | None] = {}
        confidence: dict[str, float] = {}

        for rule in self._rules.get(document_type, ()):
            match = rule.pattern.search(recognition.text)
            value = match.group(1).strip() if match and match.group(1) else ""
            if value and rule.post_process is not None:
                value = rule.post_process(value)
            if not match or not value:
                fields[rule.field] = None
                confidence[rule.field] = 0.0
                continue
            fields[rule.field] = value
            confidence[rule.field] = index.mean_confidence(match.start(), match.end())

        found = sum(1 for value in fields.values() if value is not None)
        logger.info(
            "Fields extracted",
            extra={"document_type": document_type.value, "found": found, "total": len(fields)},
        )
        return ExtractedData(fields=fields, confidence=confidence)
