"""Casedocs package."""

from casedocs.exceptions import (
    BackendError,
    DependencyError,
    FormGenerationError,
    PackageError,
    RecognitionError,
    SettingsError,
    SignatureError,
)
from casedocs.logging import configure_logging, get_logger
from casedocs.orchestrator import DocumentProcessor
from casedocs.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger()

__all__ = [
    "BackendError",
    "DependencyError",
    "DocumentProcessor",
    "FormGenerationError",
    "PackageError",
    "RecognitionError",
    "Settings",
    "SettingsError",
    "SignatureError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
