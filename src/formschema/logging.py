"""Structlog configuration for package-wide logging.

Every event carries the context variables bound in the current task, so the
"sent" and "received" lines of one generation call share its request id.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

from formschema.settings import Settings, get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import EventDict, Processor

_LOGGING_CONFIGURED = False

REQUEST_ID_KEY = "request_id"


def _rename_event_key(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Publish the event text under `message`."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _processors(config: Settings) -> list[Processor]:
    """Return the processor chain: request context, timestamp, level, then rendering."""
    renderer: Any = structlog.processors.JSONRenderer() if config.log_json else structlog.dev.ConsoleRenderer()
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _rename_event_key,
        structlog.processors.format_exc_info,
        renderer,
    ]


def _handlers(config: Settings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))
    return handlers


def configure_logging(*, settings: Settings | None = None, force: bool = False) -> None:
    """Configure structlog and stdlib logging once for the package.

    Args:
        settings (Settings | None): Runtime settings; loaded with `get_settings` when omitted.
        force (bool): Reconfigure even if logging was already set up.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603

    if _LOGGING_CONFIGURED and not force:
        return

    config = settings or get_settings()
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format="%(message)s", handlers=_handlers(config), force=force)
    structlog.configure(
        processors=_processors(config),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _LOGGING_CONFIGURED = True


@contextmanager
def request_context(request_id: str) -> Iterator[None]:
    """Tag every event logged inside the block with `request_id`.

    Args:
        request_id (str): Id of the generation call.

    Yields:
        None: Control to the caller while the id is bound.
    """
    with structlog.contextvars.bound_contextvars(**{REQUEST_ID_KEY: request_id}):
        yield


def get_logger(name: str = "formschema") -> structlog.BoundLogger:
    """Return package logger, configuring logging lazily."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
