"""Text recognition backends."""

from casedocs.backends.tesseract import TesseractRecognizer
from casedocs.backends.vision_llm import VisionLLMRecognizer

__all__ = ["TesseractRecognizer", "VisionLLMRecognizer"]
