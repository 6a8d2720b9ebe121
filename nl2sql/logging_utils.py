from __future__ import annotations

import logging
import uuid
from typing import List, Optional

import structlog

REQUEST_ID_HEADER = "X-Request-ID"


def _processors(json_logs: bool) -> List:
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    return [
        # request_id / path bound per request by bind_request_context.
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    logging.basicConfig(level=level.upper(), format="%(message)s")
    structlog.configure(
        processors=_processors(json_logs),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def bind_request_context(path: str, request_id: Optional[str] = None) -> str:
    """Start a fresh log context for one inbound request and return its id."""
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, path=path)
    return request_id


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name or __name__)


__all__ = ["REQUEST_ID_HEADER", "bind_request_context", "configure_logging", "get_logger"]
