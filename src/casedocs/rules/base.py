"""Shared rule types and table helpers."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeVar

from casedocs.processing.dates import Predicate
from casedocs.typing.enums import DocumentType

PostProcessor = Callable[[str], str]

T = TypeVar("T")


@dataclass(frozen=True)
class ExtractionRule:
    """Pattern whose first capture group yields one field value."""

    field: str
    pattern: re.Pattern[str]
    post_process: PostProcessor | None = None


@dataclass(frozen=True)
class ValidationRule:
    """Requirement on one extracted field."""

    field: str
    required: bool
    message: str
    validator: Predicate | None = None


@dataclass(frozen=True)
class RuleBook:
    """Per-document-type tables used by the classifier, extractor and validator."""

    keywords: Mapping[DocumentType, tuple[str, ...]]
    extraction: Mapping[DocumentType, tuple[ExtractionRule, ...]]
    validation: Mapping[DocumentType, tuple[ValidationRule, ...]]

    def __post_init__(self) -> None:
        ensure_complete(self.keywords, "keywords")
        ensure_complete(self.extraction, "extraction")
        ensure_complete(self.validation, "validation")


def ensure_complete(table: Mapping[DocumentType, T], name: str) -> None:
    """Check that a table has one entry per document type.

    Args:
        table (Mapping[DocumentType, T]): Table keyed by document type.
        name (str): Table name used in the error message.

    Raises:
        ValueError: If a document type has no entry.
    """
    missing = [member.value for member in DocumentType if member not in table]
    if missing:
        message = f"Rule table '{name}' has no entry for: {', '.join(missing)}"
        raise ValueError(message)


def freeze(table: dict[DocumentType, T], name: str) -> Mapping[DocumentType, T]:
    """Return a read-only view of a complete table.

    Args:
        table (dict[DocumentType, T]): Table keyed by document type.
        name (str): Table name used in the error message.

    Returns:
        Mapping[DocumentType, T]: Read-only table.
    """
    ensure_complete(table, name)
    return MappingProxyType(dict(table))
