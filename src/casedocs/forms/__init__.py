"""Versioned form templates, rendering, submissions and signatures."""

from casedocs.forms.generation import FormGenerationService
from casedocs.forms.render import render_form
from casedocs.forms.signatures import SignatureService
from casedocs.forms.submission_store import SubmissionStore
from casedocs.forms.template_store import TemplateStore
from casedocs.forms.templates import TemplateService, validate_template

__all__ = [
    "FormGenerationService",
    "SignatureService",
    "SubmissionStore",
    "TemplateService",
    "TemplateStore",
    "render_form",
    "validate_template",
]
