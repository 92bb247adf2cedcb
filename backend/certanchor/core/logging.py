"""
Structured logging for the anchoring service and CLI.

Every event carries the ledger backend and chain it was produced against,
so anchoring and verification logs from different networks can be told
apart once aggregated. Logs always go to stderr: the CLI reserves stdout
for its JSON summary.
"""

import logging
import sys
from typing import cast

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from certanchor.core.config import Settings, get_settings


def _ledger_context(settings: Settings) -> Processor:
    """Build a processor that stamps ledger identity onto each event."""
    context: dict[str, object] = {"ledger_backend": settings.ledger_backend}
    if settings.ledger_backend == "ethereum":
        context["chain_id"] = settings.blockchain_chain_id

    def add_ledger_context(
        _logger: WrappedLogger, _method_name: str, event_dict: EventDict
    ) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_ledger_context


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structlog for this process.

    Safe to call more than once (one call per application instance or CLI
    run); each call replaces the structlog configuration. Development gets
    the console renderer, other environments emit one JSON object per line.
    """
    settings = settings or get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _ledger_context(settings),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "development":
        renderer: list[Processor] = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]
    else:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # httpx and uvicorn log through the stdlib; keep them on the same stream
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
