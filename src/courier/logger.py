"""The ``courier`` structlog logger.

Configured at import from the ``LOG_LEVEL`` environment variable. The CLI
later applies ``[logging].level`` from config with :func:`set_level`.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


def _parse_level(name: str) -> int | None:
    level = getattr(logging, name.strip().upper(), None)
    return level if isinstance(level, int) else None


def _configure(level: int) -> structlog.stdlib.BoundLogger:
    # filter_by_level reads the stdlib root level
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("courier")


_env_level = _parse_level(os.environ.get("LOG_LEVEL", "INFO"))
logger = _configure(logging.INFO if _env_level is None else _env_level)


def set_level(level_name: str) -> None:
    """Set the root log level by name; unknown names leave it unchanged."""
    level = _parse_level(level_name)
    if level is not None:
        logging.getLogger().setLevel(level)
