"""Structured logging for document processing and form services.

Every module logs through `get_logger(__name__)` and passes context as
`extra={...}`. Events leave the pipeline as one flat record carrying the logger
name, the level, an ISO timestamp, the deployment environment and a `message`.
Document payloads such as recognized text or signature images never reach a
handler; their keys are kept and their values replaced by a size marker.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

from casedocs.settings import Settings, get_settings

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor

PACKAGE_LOGGER = "casedocs"

# Context keys whose values hold applicant data or binary payloads.
PAYLOAD_KEYS = frozenset(
    {"raw_text", "text", "extracted_data", "form_data", "signature_data", "image", "pdf", "pdf_bytes"}
)

_LOGGING_CONFIGURED = False


def _flatten_extra(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Lift the `extra` mapping into the event; keys already bound win."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, dict):
        for key, value in extra.items():
            event_dict.setdefault(key, value)
    return event_dict


def _redact_payloads(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Replace document payload values with a size marker.

    Args:
        logger: Wrapped stdlib logger (unused).
        method_name: Level method that emitted the event (unused).
        event_dict: Flattened event.

    Returns:
        EventDict: Event whose payload keys read `<redacted N>`.
    """
    for key in PAYLOAD_KEYS.intersection(event_dict):
        value = event_dict[key]
        size = len(value) if isinstance(value, (str, bytes, bytearray, dict, list)) else 0
        event_dict[key] = f"<redacted {size}>"
    return event_dict


def _environment_stamper(environment: str) -> Processor:
    def stamp(
        logger: logging.Logger,  # noqa: ARG001
        method_name: str,  # noqa: ARG001
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("environment", environment)
        return event_dict

    return stamp


def _event_to_message(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def configure_logging(*, settings: Settings | None = None, force: bool = False) -> None:
    """Install handlers and the structlog pipeline.

    Runs once per process unless `force` is set. A forced setup turns off logger
    caching so that module loggers created earlier pick up the new pipeline.

    Args:
        settings (Settings | None): Source of level, format, log file and environment.
        force (bool): Reconfigure even if logging is already set up.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603

    if _LOGGING_CONFIGURED and not force:
        return

    config = settings or get_settings()
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    logging.basicConfig(level=log_level, format="%(message)s", handlers=handlers, force=force)

    renderer: Any = structlog.processors.JSONRenderer()
    if not config.log_json:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _environment_stamper(config.app_env),
            _flatten_extra,
            _redact_payloads,
            _event_to_message,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=not force,
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a logger for a casedocs module.

    Args:
        name (str | None): Module name, usually `__name__`. Defaults to the package logger.

    Returns:
        structlog.BoundLogger: Logger writing through the configured pipeline.
    """
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return structlog.get_logger(name or PACKAGE_LOGGER)
