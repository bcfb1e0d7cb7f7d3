"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class BackendError(PackageError):
    """Raised when a recognition or generative backend call fails, times out or answers garbage."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class RecognitionError(PackageError):
    """Raised when every configured recognizer failed for a page."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class TemplateValidationError(PackageError):
    """Raised when a form template is structurally invalid."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class TemplateStateError(PackageError):
    """Raised when a template lifecycle transition is not allowed."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class TemplateNotFoundError(PackageError):
    """Raised when a template (or one of its versions) does not exist."""

    template_id: str
    version: int | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if self.version is not None:
            return f"Template '{self.template_id}' has no version {self.version}"
        return f"Template with ID '{self.template_id}' not found"


@dataclass(frozen=True)
class FormGenerationError(PackageError):
    """Raised when a form cannot be rendered or generated."""

    message: str
    missing_fields: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        """Return error message payload."""
        if self.missing_fields:
            return f"{self.message}: {', '.join(self.missing_fields)}"
        return self.message


@dataclass(frozen=True)
class SubmissionNotFoundError(PackageError):
    """Raised when a form submission does not exist."""

    submission_id: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Submission with ID '{self.submission_id}' not found"


@dataclass(frozen=True)
class SubmissionStateError(PackageError):
    """Raised when a submission status transition is not allowed."""

    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.reason


@dataclass(frozen=True)
class SignatureError(PackageError):
    """Raised when a signature request is rejected."""

    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.reason


@dataclass
class StoreError(PackageError):
    """Raised when a persisted envelope cannot be read or written."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
