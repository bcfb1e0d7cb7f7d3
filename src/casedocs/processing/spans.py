"""Character spans of recognized words inside the recognized text."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from casedocs.typing.models import RecognitionResult, RecognizedToken


@dataclass(frozen=True)
class WordSpan:
    """Recognized word located at `[start, end)` in the text."""

    start: int
    end: int
    word: RecognizedToken


class WordSpanIndex:
    """Sorted word spans answering "which words start inside this range" queries."""

    def __init__(self, spans: list[WordSpan]) -> None:
        self._spans = sorted(spans, key=lambda span: span.start)
        self._starts = [span.start for span in self._spans]

    @classmethod
    def from_recognition(cls, result: RecognitionResult) -> WordSpanIndex:
        """Locate every word of a recognition result in its text.

        Words are searched left to right from the end of the previous located word, so
        repeated words map to successive occurrences. Words that cannot be found are
        left out.

        Args:
            result (RecognitionResult): Recognition output.

        Returns:
            WordSpanIndex: Index over the located words.
        """
        spans: list[WordSpan] = []
        cursor = 0
        for word in result.words:
            if not word.text:
                continue
            start = result.text.find(word.text, cursor)
            if start < 0:
                continue
            end = start + len(word.text)
            spans.append(WordSpan(start=start, end=end, word=word))
            cursor = end
        return cls(spans)

    def __len__(self) -> int:
        return len(self._spans)

    def words_starting_in(self, start: int, end: int) -> list[RecognizedToken]:
        """Return words whose start offset lies in `[start, end)`."""
        lo = bisect_left(self._starts, start)
        hi = bisect_left(self._starts, end)
        return [span.word for span in self._spans[lo:hi]]

    def mean_confidence(self, start: int, end: int) -> float:
        """Return the mean confidence of words starting in `[start, end)`, or 0."""
        words = self.words_starting_in(start, end)
        if not words:
            return 0.0
        return sum(word.confidence for word in words) / len(words)
