"""Structured logging configuration for the ability engine.

Every entry carries ``app="ability_engine"``. Keys bound with
:func:`log_context` (the caster binds ``actor_id`` and ``ability_id``)
are merged into everything logged while the block runs, including
records emitted from the dispatcher and the ledger.

Example:
    >>> from ability_engine.core.logging import get_logger, log_context
    >>> logger = get_logger(__name__)
    >>> with log_context(actor_id="user-1", ability_id="spell-blink"):
    ...     logger.info("Dispatching effect")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


APP_NAME = "ability_engine"

_PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Stamp the application name onto every entry."""
    event_dict["app"] = APP_NAME
    return event_dict


def configure_logging(
    *,
    level: str | None = None,
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Logging level name. Defaults to ``Settings.log_level``.
        json_format: Render one JSON object per line instead of the
            coloured console format.
        log_file: Optional path that also receives stdlib log records
            (sqlite and tenacity retry messages).
    """
    if level is None:
        from ability_engine.core.config import get_settings

        level = get_settings().log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format=_PLAIN_FORMAT,
        level=numeric_level,
        stream=sys.stdout,
        force=True,
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind keys into every subsequent entry on this thread or task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop every bound key, e.g. at the end of a host request."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind keys for the duration of a block.

    On exit the keys are restored to whatever they were before, so an
    outer request context bound with :func:`bind_context` survives.
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = [
    "APP_NAME",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
