"""Document classification: keyword scoring and a generative strategy with fallback."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from casedocs.backends.openai_chat import create_chat_completion, parse_json_object
from casedocs.exceptions import BackendError
from casedocs.fallback import first_successful
from casedocs.logging import get_logger
from casedocs.prompts import CLASSIFICATION_SYSTEM_PROMPT, build_classification_prompt
from casedocs.rules import KEYWORDS
from casedocs.typing.enums import DocumentType
from casedocs.typing.models import MAX_ALTERNATIVES, ClassificationResult, DocumentTypeScore, clamp_confidence

if TYPE_CHECKING:
    from casedocs.settings import Settings
    from casedocs.typing.protocol import ClassificationStrategy

logger = get_logger(__name__)

KEYWORD_CONFIDENCE_THRESHOLD = 30.0
MIN_GENERATIVE_TEXT_LENGTH = 50

ChatCompletion = Callable[[dict[str, Any]], str]


class KeywordClassifier:
    """Deterministic classifier scoring the share of matched keywords per type."""

    name = "keywords"

    def __init__(
        self,
        keywords: Mapping[DocumentType, Sequence[str]] = KEYWORDS,
        *,
        threshold: float = KEYWORD_CONFIDENCE_THRESHOLD,
    ) -> None:
        self._keywords = keywords
        self._threshold = threshold

    def scores(self, text: str) -> dict[DocumentType, float]:
        """Return the matched keyword percentage of every scored type.

        Types without keywords (the catch-all type) are not scored.

        Args:
            text (str): Recognized text.

        Returns:
            dict[DocumentType, float]: Scores in enum order.
        """
        lowered = text.lower()
        scores: dict[DocumentType, float] = {}
        for document_type in DocumentType:
            keywords = self._keywords.get(document_type, ())
            if not keywords:
                continue
            matched = sum(1 for keyword in keywords if keyword.lower() in lowered)
            scores[document_type] = matched / len(keywords) * 100
        return scores

    def classify(self, text: str) -> ClassificationResult:
        """Classify text by keyword share.

        Below the threshold the text is labelled `other` with the inverted best score.
        Ties keep enum order.

        Args:
            text (str): Recognized text.

        Returns:
            ClassificationResult: Best type, confidence and up to three alternatives.
        """
        scores = self.scores(text)
        best_type, best_score = DocumentType.OTHER, 0.0
        for document_type, score in scores.items():
            if score > best_score:
                best_type, best_score = document_type, score

        if best_score < self._threshold:
            best_type, best_score = DocumentType.OTHER, 100 - best_score

        ranked = sorted(
            (item for item in scores.items() if item[0] != best_type),
            key=lambda item: item[1],
            reverse=True,
        )
        alternatives = tuple(
            DocumentTypeScore(document_type=document_type, confidence=score)
            for document_type, score in ranked[:MAX_ALTERNATIVES]
        )
        return ClassificationResult(document_type=best_type, confidence=best_score, alternatives=alternatives)


class GenerativeClassifier:
    """Classifier asking an OpenAI-compatible chat model.

    Raises `BackendError` for short text, transport failures and malformed answers;
    `DocumentClassifier` turns those into a keyword fallback.
    """

    name = "generative"

    def __init__(self, settings: Settings, *, complete: ChatCompletion | None = None) -> None:
        """Initialize classifier.

        Args:
            settings (Settings): Runtime settings.
            complete (ChatCompletion | None): Chat call returning message content.
                Defaults to the OpenAI SDK.
        """
        self._settings = settings
        self._complete = complete or self._default_complete

    def _default_complete(self, payload: dict[str, Any]) -> str:
        return create_chat_completion(self._settings, payload, timeout=self._settings.classification_timeout)

    def classify(self, text: str) -> ClassificationResult:
        """Classify text with the chat model.

        Args:
            text (str): Recognized text.

        Raises:
            BackendError: If the text is too short, the backend fails or answers garbage.

        Returns:
            ClassificationResult: Parsed classification.
        """
        if len(text) < MIN_GENERATIVE_TEXT_LENGTH:
            raise BackendError(message=f"Text shorter than {MIN_GENERATIVE_TEXT_LENGTH} characters")

        payload = {
            "model": self._settings.effective_classification_model,
            "temperature": 0.3,
            "messages": [
                {"role": "system", "content": CLASSIFICATION_SYSTEM_PROMPT},
                {"role": "user", "content": build_classification_prompt(text, DocumentType)},
            ],
            "response_format": {"type": "json_object"},
        }
        return parse_classification_answer(parse_json_object(self._complete(payload)))


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _document_type(value: object) -> DocumentType | None:
    if not isinstance(value, str):
        return None
    try:
        return DocumentType(value.strip().lower())
    except ValueError:
        return None


def parse_classification_answer(answer: dict[str, Any]) -> ClassificationResult:
    """Validate a generative classification answer.

    `bestMatch` must name a known type and `confidence` must be numeric; both are
    required. Alternatives with an unknown type or a non-numeric confidence are
    dropped, the winning type is removed and at most three are kept.

    Args:
        answer (dict[str, Any]): Decoded JSON answer.

    Raises:
        BackendError: If a required member is missing or invalid.

    Returns:
        ClassificationResult: Classification with clamped confidences.
    """
    best_type = _document_type(answer.get("bestMatch"))
    if best_type is None:
        raise BackendError(message=f"Invalid bestMatch in classification answer: {answer.get('bestMatch')!r}")
    confidence = answer.get("confidence")
    if not _is_number(confidence):
        raise BackendError(message="Classification answer has no numeric confidence")

    raw_alternatives = answer.get("alternatives") or []
    if not isinstance(raw_alternatives, list):
        raw_alternatives = []

    alternatives: dict[DocumentType, float] = {}
    for item in raw_alternatives:
        if not isinstance(item, dict):
            continue
        alternative_type = _document_type(item.get("type"))
        alternative_confidence = item.get("confidence")
        if alternative_type is None or alternative_type == best_type:
            continue
        if not _is_number(alternative_confidence):
            continue
        clamped = clamp_confidence(alternative_confidence)
        alternatives[alternative_type] = max(clamped, alternatives.get(alternative_type, 0.0))

    ranked = sorted(alternatives.items(), key=lambda item: item[1], reverse=True)[:MAX_ALTERNATIVES]
    return ClassificationResult(
        document_type=best_type,
        confidence=clamp_confidence(confidence),
        alternatives=tuple(DocumentTypeScore(document_type=kind, confidence=score) for kind, score in ranked),
    )


class DocumentClassifier:
    """Tries the configured strategies in order and always ends with keywords."""

    def __init__(
        self,
        strategies: Sequence[ClassificationStrategy] = (),
        *,
        keyword_classifier: KeywordClassifier | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize classifier.

        Args:
            strategies (Sequence[ClassificationStrategy]): Strategies tried before keywords.
            keyword_classifier (KeywordClassifier | None): Final deterministic strategy.
            timeout (float | None): Per-strategy timeout in seconds.
        """
        self._strategies = tuple(strategies)
        self._keywords = keyword_classifier or KeywordClassifier()
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentClassifier:
        """Enable the generative strategy when a credential is configured.

        Args:
            settings (Settings): Runtime settings.

        Returns:
            DocumentClassifier: Configured classifier.
        """
        strategies: list[ClassificationStrategy] = []
        if settings.generative_backend_configured:
            strategies.append(GenerativeClassifier(settings))
        return cls(strategies, timeout=settings.classification_timeout)

    def classify(self, text: str) -> ClassificationResult:
        """Classify recognized text. Never raises for backend problems.

        Args:
            text (str): Recognized text.

        Returns:
            ClassificationResult: First successful strategy's result, else keywords.
        """
        strategy = KeywordClassifier.name
        result: ClassificationResult | None = None
        if self._strategies:
            attempts = [(item.name, lambda item=item: item.classify(text)) for item in self._strategies]
            try:
                strategy, result = first_successful(
                    attempts,
                    timeout=self._timeout,
                    failure_event="Generative classification failed, using keywords",
                )
            except BackendError:
                result = None
        if result is None:
            strategy, result = KeywordClassifier.name, self._keywords.classify(text)

        logger.info(
            "Document classified",
            extra={
                "strategy": strategy,
                "document_type": result.document_type.value,
                "confidence": round(result.confidence, 1),
            },
        )
        return result
