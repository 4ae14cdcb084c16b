"""
Structured logging configuration using structlog.

The engine logs through stdlib ``logging.getLogger(__name__)``; those records
and structlog's own are rendered by one formatter and stamped with the service
name and the active bridge environment.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings

SERVICE_NAME = "solbridge"
LOG_FORMATS = ("auto", "json", "console")


def _stamp_service(environment: str) -> structlog.types.Processor:
    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and the root logger.

    Args:
        log_level: Override log level (default: settings.log_level)
        log_format: ``json``, ``console`` or ``auto`` (default: settings.log_format)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    fmt = (log_format or settings.log_format).lower()
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {fmt!r}")
    console = fmt == "console" or (fmt == "auto" and level == logging.DEBUG)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _stamp_service(settings.bridge_environment),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if console:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every RPC round trip at INFO
    for name in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
