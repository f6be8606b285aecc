"""Structured logging for pachi_ocr.

Events are built with structlog and handed to the stdlib ``logging`` tree, so a
library caller sees nothing unless it configures logging itself. The CLI and
the UI call :func:`configure_logging` to get rendered output on stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_PRE_CHAIN = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=False),
]

_handler: logging.Handler | None = None

if not structlog.is_configured():
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_PRE_CHAIN,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

logging.getLogger("pachi_ocr").addHandler(logging.NullHandler())


def configure_logging(level: str = "INFO", json: bool = True) -> logging.Handler:
    """Send records at ``level`` and above to stderr as JSON lines (or console text)."""
    global _handler

    renderer: Any = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=_PRE_CHAIN,
        )
    )

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _handler = handler
    return handler


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Remove the handler installed by :func:`configure_logging`, if any."""
    global _handler

    if _handler is not None:
        logging.getLogger().removeHandler(_handler)
        _handler = None
