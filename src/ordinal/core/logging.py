"""Structured logging for the ordering engine.

configure_logging() routes structlog through stdlib handlers, one per
configured output, each with its own format (console or JSON) and level.

Events logged inside an OrderingEngine mutation carry the context the engine
binds for the call (operation, mutation_id, parent_id, public_id). An
OrdinalError passed as ``error=`` is rendered as its name plus numeric code.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from ordinal.core.errors import OrdinalError

if TYPE_CHECKING:
    from ordinal.config.models import LoggingConfig

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Statement echo is controlled by database.echo, not by the log level
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _render_ordinal_error(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    error = event_dict.get("error")
    if isinstance(error, OrdinalError):
        event_dict["error"] = error.error_name
        event_dict["error_code"] = error.code.value
        if error.retryable:
            event_dict["retryable"] = True
    return event_dict


def configure_logging(
    config: LoggingConfig | None = None,
    *,
    level: str | None = None,
) -> None:
    """Configure structlog and the root logger from a LoggingConfig.

    Args:
        config: Outputs and levels; defaults to one console output on stderr
        level: Overrides config.level (and the level of every output)
    """
    from ordinal.config.models import LoggingConfig

    config = config or LoggingConfig()
    if level is not None:
        config = config.model_copy(
            update={
                "level": level.upper(),
                "outputs": [o.model_copy(update={"level": None}) for o in config.outputs],
            }
        )

    default_level = _LEVEL_MAP.get(config.level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _render_ordinal_error,  # type: ignore[list-item]
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Don't cache - allows reconfiguration and respects level changes
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers:
        existing.close()
    root_logger.handlers.clear()
    root_logger.setLevel(default_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for output in config.outputs:
        output_level = _LEVEL_MAP.get((output.level or config.level).upper(), default_level)
        handler = _create_handler(output.destination)
        handler.setLevel(output_level)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_renderer(output.format, output.destination),
                foreign_pre_chain=shared_processors,
            )
        )
        root_logger.addHandler(handler)


def _renderer(fmt: str, destination: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    stream = sys.stdout if destination == "stdout" else sys.stderr
    return structlog.dev.ConsoleRenderer(
        colors=destination in ("stderr", "stdout") and stream.isatty(),
        pad_event_to=0,
        pad_level=False,
    )


def _create_handler(destination: str) -> logging.Handler:
    """Create handler for stderr, stdout, or file path."""
    if destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a")


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
