"""Structured logging for the crawl, using structlog.

Console output for interactive runs, JSON lines for scheduled ones. Every
log line goes to stderr: a crawl prints its JSON record on stdout.

Log lines emitted while a crawl is running carry the crawl's user id and
portal base URL (see ``crawl_context``), so interleaved output from several
crawls can still be told apart.
"""

import logging
import sys
from contextlib import AbstractContextManager

import structlog

# Quiet by default: requests/urllib3 log every connection at DEBUG
_NOISY_LOGGERS = ("urllib3", "requests")


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_output: Emit JSON lines instead of the coloured console format.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stderr)]
    root.setLevel(numeric_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def crawl_context(uid: str, base_url: str) -> AbstractContextManager:
    """Bind the crawl's user id and portal to every log line inside the block."""
    return structlog.contextvars.bound_contextvars(crawl_uid=uid, portal=base_url)


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger bound with the module name (pass ``__name__``)."""
    return structlog.get_logger(name)
