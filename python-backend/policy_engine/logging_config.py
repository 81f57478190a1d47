"""structlog setup shared by the API and the CLI."""

from __future__ import annotations

import logging
import os
import sys

import structlog


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # Looked up per logger so a replaced sys.stderr is picked up.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str | None = None) -> None:
    """Route structlog output to stderr, filtered at ``level``.

    The level defaults to ``POLICY_ENGINE_LOG_LEVEL`` or INFO. Output goes to
    stderr so CLI JSON on stdout stays clean.
    """

    name = (level or os.environ.get("POLICY_ENGINE_LOG_LEVEL") or "INFO").upper()
    numeric = getattr(logging, name, logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
