"""Structured logging setup based on structlog."""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any, TextIO

import structlog


def configure_logging(
    level: str = "INFO",
    *,
    json_output: bool = False,
    capture_warnings: bool = True,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog and the standard logging bridge.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render events as JSON lines instead of coloured console text.
        capture_warnings: Route ``warnings.warn`` output (e.g. scikit-learn
            ConvergenceWarning) through the logging system.
        stream: Output stream, stderr by default so CLI tables stay clean.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    stream = stream if stream is not None else sys.stderr

    logging.basicConfig(format="%(message)s", stream=stream, level=log_level, force=True)
    logging.captureWarnings(capture_warnings)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        # Later calls may switch the stream
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, usually named after the calling module."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> AbstractContextManager[None]:
    """
    Bind key/value pairs to every log event emitted inside the block.

    Example:
        with log_context(dataset="solubility", model="PLS"):
            log.info("Tuning model")  # carries dataset and model
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
