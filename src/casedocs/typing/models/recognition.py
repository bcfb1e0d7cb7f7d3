"""Text recognition models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BoundingBox(BaseModel):
    """Axis-aligned box in image pixels. Zeroed when a backend has no geometry."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x0: float = 0.0
    y0: float = 0.0
    x1: float = 0.0
    y1: float = 0.0


class RecognizedToken(BaseModel):
    """One recognized word or line."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str
    confidence: float = Field(ge=0, le=100)
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)


class RecognitionResult(BaseModel):
    """Recognized text of one page or image."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str
    confidence: float = Field(ge=0, le=100)
    words: tuple[RecognizedToken, ...] = ()
    lines: tuple[RecognizedToken, ...] = ()
