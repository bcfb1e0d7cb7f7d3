"""Image normalization ahead of text recognition."""

from __future__ import annotations

import io
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from casedocs.exceptions import BackendError
from casedocs.logging import get_logger

try:
    from PIL import Image, ImageEnhance, ImageFilter, ImageOps
except Exception:  # pragma: no cover - optional dependency at runtime
    Image: Any
    Image = None
    ImageEnhance: Any
    ImageEnhance = None
    ImageFilter: Any
    ImageFilter = None
    ImageOps: Any
    ImageOps = None

logger = get_logger(__name__)

_DESKEW_MAX_ANGLE = 5.0
_DESKEW_STEP = 0.5
_MEDIAN_SIZE = 3


class NormalizationOptions(BaseModel):
    """Ordered, independently toggled normalization steps. Unset steps are skipped."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    grayscale: bool = False
    normalize: bool = False
    threshold: int | None = Field(default=None, ge=0, le=255)
    sharpen: bool = False
    denoise: bool = False
    deskew: bool = False

    @classmethod
    def recommended(cls) -> NormalizationOptions:
        """Return the defaults used for scanned documents."""
        return cls(grayscale=True, normalize=True, threshold=128, sharpen=True, denoise=True)

    @property
    def is_noop(self) -> bool:
        """Return whether no step is enabled."""
        steps = (self.grayscale, self.normalize, self.sharpen, self.denoise, self.deskew)
        return not any(steps) and self.threshold is None


def _require_pillow() -> None:
    if Image is None:
        raise BackendError(message="Pillow is required for image normalization")


def _open(image_bytes: bytes) -> Any:
    _require_pillow()
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except Exception as exc:
        raise BackendError(message=f"Cannot decode image: {exc}") from exc
    return image


def _encode(image: Any) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def normalize_image(image_bytes: bytes, options: NormalizationOptions | None = None) -> bytes:
    """Apply the enabled normalization steps in a fixed order.

    Order: grayscale, histogram normalization, binarization, sharpening, median
    denoise, deskew.

    Args:
        image_bytes (bytes): Encoded source image.
        options (NormalizationOptions | None): Steps to apply. Defaults to none.

    Raises:
        BackendError: If Pillow is missing or the image cannot be decoded.

    Returns:
        bytes: PNG-encoded image, or the input bytes unchanged when no step is enabled.
    """
    options = options or NormalizationOptions()
    if options.is_noop:
        return image_bytes

    image = _open(image_bytes)
    if image.mode not in {"L", "RGB"}:
        image = image.convert("RGB")

    if options.grayscale:
        image = image.convert("L")
    if options.normalize:
        image = ImageOps.autocontrast(image)
    if options.threshold is not None:
        threshold = options.threshold
        image = image.convert("L").point(lambda pixel: 255 if pixel > threshold else 0)
    if options.sharpen:
        image = image.filter(ImageFilter.SHARPEN)
    if options.denoise:
        image = image.filter(ImageFilter.MedianFilter(size=_MEDIAN_SIZE))
    if options.deskew:
        angle = estimate_skew(image)
        if angle:
            image = image.rotate(angle, expand=True, fillcolor=_white(image))

    logger.debug("Image normalized", extra={"options": options.model_dump(), "size": image.size})
    return _encode(image)


def _white(image: Any) -> Any:
    return 255 if image.mode == "L" else (255, 255, 255)


def _row_profile_variance(image: Any) -> float:
    width, height = image.size
    if width == 0 or height == 0:
        return 0.0
    profile = list(image.resize((1, height), Image.Resampling.BOX).getdata())
    mean = sum(profile) / height
    return sum((value - mean) ** 2 for value in profile) / height


def estimate_skew(image: Any, *, max_angle: float = _DESKEW_MAX_ANGLE, step: float = _DESKEW_STEP) -> float:
    """Estimate the rotation that best aligns text rows.

    Each candidate angle is scored by the variance of the horizontal projection
    profile; aligned text lines produce the sharpest alternation of dark and light rows.

    Args:
        image (Any): PIL image.
        max_angle (float): Largest absolute angle tried, in degrees.
        step (float): Angle increment in degrees.

    Returns:
        float: Counter-clockwise rotation in degrees that deskews the image.
    """
    _require_pillow()
    gray = image.convert("L")
    # Shrink large scans; the profile only needs row resolution.
    if gray.width > 1000:
        ratio = 1000 / gray.width
        gray = gray.resize((1000, max(1, int(gray.height * ratio))))

    best_angle = 0.0
    best_score = _row_profile_variance(gray)
    steps = int(max_angle / step)
    for index in range(-steps, steps + 1):
        angle = index * step
        if angle == 0:
            continue
        score = _row_profile_variance(gray.rotate(angle, fillcolor=255))
        if score > best_score:
            best_angle, best_score = angle, score
    return best_angle


def enhance_contrast(image_bytes: bytes, factor: float = 1.5) -> bytes:
    """Scale image contrast by `factor` (1.0 keeps the image unchanged)."""
    image = _open(image_bytes)
    return _encode(ImageEnhance.Contrast(image).enhance(factor))


def resize_to_width(image_bytes: bytes, width: int) -> bytes:
    """Resize an image to `width` pixels keeping its aspect ratio.

    Raises:
        ValueError: If `width` is not positive.
    """
    if width <= 0:
        message = f"Width must be positive, got {width}"
        raise ValueError(message)
    image = _open(image_bytes)
    height = max(1, round(image.height * width / image.width))
    return _encode(image.resize((width, height), Image.Resampling.LANCZOS))


def crop(image_bytes: bytes, *, left: int, top: int, width: int, height: int) -> bytes:
    """Crop a rectangle out of an image.

    Raises:
        ValueError: If the rectangle is empty or lies outside the image.
    """
    image = _open(image_bytes)
    right, bottom = left + width, top + height
    if width <= 0 or height <= 0 or left < 0 or top < 0 or right > image.width or bottom > image.height:
        message = f"Crop box {(left, top, right, bottom)} is outside image of size {image.size}"
        raise ValueError(message)
    return _encode(image.crop((left, top, right, bottom)))
