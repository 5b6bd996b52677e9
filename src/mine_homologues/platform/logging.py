"""structlog over stdlib logging.

Every log line carries the request id and, during a homologue lookup, the
service root of the calling mine.
"""

import logging
import sys
from typing import cast

import structlog
from structlog.types import EventDict, Processor

from mine_homologues.platform.config import get_settings
from mine_homologues.platform.context import request_id_ctx, service_root_ctx

_HANDLER_NAME = "mine_homologues"

# Third-party loggers that are chatty at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def add_lookup_context(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach request id and calling mine from context variables."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    service_root = service_root_ctx.get()
    if service_root:
        event_dict.setdefault("service_root", service_root)
    return event_dict


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Safe to call more than once; the handler installed by a previous call is
    replaced rather than duplicated.
    """
    settings = get_settings()
    level = level or settings.log_level
    log_format = log_format or settings.log_format

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_lookup_context,
    ]
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger; use as ``logger = get_logger(__name__)``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
