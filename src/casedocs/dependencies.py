"""Runtime dependency checks for the heavier recognition and PDF backends."""

from __future__ import annotations

import importlib.util
import shutil
from typing import TYPE_CHECKING

from casedocs.exceptions import DependencyError

if TYPE_CHECKING:
    from casedocs.settings import Settings


def _is_module_available(module_name: str) -> bool:
    """Check whether a module can be imported.

    Args:
        module_name (str): Python module name.

    Returns:
        bool: True if import spec exists.
    """
    return importlib.util.find_spec(module_name) is not None


def _collect_missing_dependencies(modules_by_package: dict[str, str]) -> list[str]:
    """Collect missing packages for a module mapping.

    Args:
        modules_by_package (Mapping[str, str]): Mapping of package name -> import module.

    Returns:
        list[str]: Missing package names.
    """
    return [package for package, module in modules_by_package.items() if not _is_module_available(module)]


def ensure_imaging_dependencies() -> None:
    """Validate dependencies of the image normalizer.

    Raises:
        DependencyError: If Pillow is missing.
    """
    missing = _collect_missing_dependencies({"pillow": "PIL"})
    if missing:
        raise DependencyError(missing_package=missing, message="image normalization")


def ensure_tesseract_dependencies() -> None:
    """Validate dependencies of the local Tesseract recognizer.

    Raises:
        DependencyError: If pytesseract, Pillow or the `tesseract` binary is missing.
    """
    missing = _collect_missing_dependencies({"pytesseract": "pytesseract", "pillow": "PIL"})
    if shutil.which("tesseract") is None:
        missing.append("tesseract (binary)")
    if missing:
        raise DependencyError(missing_package=missing, message="tesseract recognition")


def ensure_remote_dependencies() -> None:
    """Validate dependencies of the OpenAI-compatible backends.

    Raises:
        DependencyError: If one or more required modules are missing.
    """
    missing = _collect_missing_dependencies({"httpx": "httpx", "openai": "openai", "certifi": "certifi"})
    if missing:
        raise DependencyError(missing_package=missing, message="remote backends")


def ensure_pdf_dependencies() -> None:
    """Validate dependencies of PDF text extraction, rasterisation and rendering.

    Raises:
        DependencyError: If PyMuPDF is missing.
    """
    missing = _collect_missing_dependencies({"pymupdf": "fitz"})
    if missing:
        raise DependencyError(missing_package=missing, message="pdf")


def ensure_pipeline_dependencies(settings: Settings) -> None:
    """Validate what the configured document pipeline needs before it is built.

    The Tesseract binary is only mandatory when no remote recognizer can take over.

    Args:
        settings (Settings): Runtime settings.

    Raises:
        DependencyError: If a required package or binary is missing.
    """
    ensure_pdf_dependencies()
    if settings.ocr_preprocess:
        ensure_imaging_dependencies()
    if settings.openai_api_key:
        ensure_remote_dependencies()
    else:
        ensure_tesseract_dependencies()
