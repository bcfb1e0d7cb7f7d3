"""Prompt builders and response schema helpers."""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING, Any, cast

from casedocs.typing.models import SanitizedJsonSchema

if TYPE_CHECKING:
    from collections.abc import Iterable

    from casedocs.typing.enums import DocumentType

CLASSIFICATION_TEXT_LIMIT = 1000

CLASSIFICATION_SYSTEM_PROMPT = (
    "You are a document classification expert. Analyze document text and classify it accurately."
)

TRANSCRIPTION_PROMPT = (
    "Transcribe every line of text visible in this scanned document, top to bottom. "
    "Keep the original spelling, digits and punctuation. "
    "For each line give a confidence from 0 to 100 describing how legible it is. "
    "Return an empty list when the image contains no text."
)


def sanitize_json_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Sanitize a JSON schema to maximize strict compatibility.

    Args:
        schema (dict[str, Any]): Raw JSON schema.

    Returns:
        dict[str, Any]: Sanitized JSON schema.
    """
    cleaned = deepcopy(schema)

    def _walk(node: object) -> None:
        if isinstance(node, dict):
            node_dict = cast("dict[str, Any]", node)
            if "properties" in node_dict:
                node_dict.setdefault("type", "object")
                props = node_dict["properties"]
                if isinstance(props, dict):
                    props_dict = cast("dict[str, Any]", props)
                    node_dict["required"] = sorted(str(key) for key in props_dict)
                    node_dict["additionalProperties"] = False
            if "$ref" in node_dict and "default" in node_dict:
                node_dict.pop("default", None)
            for value in node_dict.values():
                _walk(value)
        elif isinstance(node, list):
            for item in node:
                _walk(item)

    _walk(cleaned)
    return cleaned


def schema_response_format(name: str, schema: dict[str, Any]) -> SanitizedJsonSchema:
    """Build strict response format payload.

    Args:
        name (str): Schema name in response format.
        schema (dict[str, Any]): Raw schema payload.

    Returns:
        SanitizedJsonSchema: Strict response schema wrapper.
    """
    return SanitizedJsonSchema(
        name=name,
        schema=sanitize_json_schema(schema),
        strict=True,
    )


def build_classification_prompt(text: str, document_types: Iterable[DocumentType]) -> str:
    """Build the closed-vocabulary classification prompt.

    Only the first `CLASSIFICATION_TEXT_LIMIT` characters of the text are sent.

    Args:
        text (str): Recognized text.
        document_types (Iterable[DocumentType]): Allowed labels.

    Returns:
        str: Prompt text.
    """
    labels = ", ".join(document_type.value for document_type in document_types)
    excerpt = text[:CLASSIFICATION_TEXT_LIMIT]
    return (
        "Analyze the following document text and classify it into exactly one of these categories:\n"
        f"{labels}\n\n"
        "Give a confidence score from 0 to 100 for the best match and for up to 3 alternatives.\n\n"
        "Document text:\n"
        f'"""\n{excerpt}\n"""\n\n'
        "Respond with a JSON object of the form:\n"
        '{"bestMatch": "<category>", "confidence": 85, '
        '"alternatives": [{"type": "<category>", "confidence": 40}]}'
    )
