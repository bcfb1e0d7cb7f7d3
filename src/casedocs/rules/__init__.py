"""Per-document-type rule tables."""

from casedocs.rules.base import ExtractionRule, RuleBook, ValidationRule, ensure_complete
from casedocs.rules.extraction import EXTRACTION_RULES
from casedocs.rules.keywords import KEYWORDS
from casedocs.rules.validation import VALIDATION_RULES

DEFAULT_RULES = RuleBook(keywords=KEYWORDS, extraction=EXTRACTION_RULES, validation=VALIDATION_RULES)

__all__ = [
    "DEFAULT_RULES",
    "EXTRACTION_RULES",
    "KEYWORDS",
    "VALIDATION_RULES",
    "ExtractionRule",
    "RuleBook",
    "ValidationRule",
    "ensure_complete",
]
