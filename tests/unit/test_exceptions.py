from __future__ import annotations

import pytest

from casedocs.exceptions import (
    BackendError,
    DependencyError,
    FormGenerationError,
    PackageError,
    RecognitionError,
    SettingsError,
    SignatureError,
    StoreError,
    SubmissionNotFoundError,
    SubmissionStateError,
    TemplateNotFoundError,
    TemplateStateError,
    TemplateValidationError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        SettingsError,
        DependencyError,
        BackendError,
        RecognitionError,
        TemplateValidationError,
        TemplateStateError,
        TemplateNotFoundError,
        FormGenerationError,
        SubmissionNotFoundError,
        SubmissionStateError,
        SignatureError,
        StoreError,
    ],
)
def test_root_exception_hierarchy(error_type: type[Exception]) -> None:
    assert issubclass(error_type, PackageError)


def test_form_generation_error_lists_missing_fields() -> None:
    error = FormGenerationError(message="Missing required fields", missing_fields=["surname", "dob"])
    assert str(error) == "Missing required fields: surname, dob"
    assert error.missing_fields == ["surname", "dob"]


def test_template_not_found_mentions_version() -> None:
    assert str(TemplateNotFoundError(template_id="t1")) == "Template with ID 't1' not found"
    assert str(TemplateNotFoundError(template_id="t1", version=3)) == "Template 't1' has no version 3"


def test_settings_error_includes_cause() -> None:
    assert str(SettingsError(exc=ValueError("bad"))) == "Failed to load settings: bad"
    assert str(SettingsError()) == "Failed to load settings"


def test_dependency_error_names_packages() -> None:
    error = DependencyError(missing_package=["pillow", "pymupdf"], message="pdf")
    assert str(error) == "Missing runtime dependencies for 'pdf': pillow, pymupdf"
