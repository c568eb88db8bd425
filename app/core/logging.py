"""Structured logging with structlog.

JSON lines in production, colored console output when DEBUG is set. Every
entry carries the request id (API) or job id (arq worker) of the unit of work
that emitted it, and free-text fields such as search queries are clipped so a
pasted essay never floods the log.
"""

import logging
import sys
from contextvars import ContextVar

import structlog

from app.config import get_settings

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
job_id_var: ContextVar[str | None] = ContextVar("job_id", default=None)

# Free-text fields clipped to MAX_FIELD_CHARS
CLIPPED_FIELDS = frozenset({"query", "body", "response_excerpt"})
MAX_FIELD_CHARS = 80

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "uvicorn.access", "sqlalchemy.engine", "arq.jobs")


def _add_unit_of_work(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    request_id = request_id_var.get()
    if request_id is not None:
        event_dict.setdefault("request_id", request_id)
    job_id = job_id_var.get()
    if job_id is not None:
        event_dict.setdefault("job_id", job_id)
    return event_dict


def _clip_free_text(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    for key in CLIPPED_FIELDS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
            event_dict[key] = value[:MAX_FIELD_CHARS] + "…"
    return event_dict


def _root_handler(renderer: structlog.types.Processor) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    return handler


def setup_logging() -> None:
    """Route structlog and stdlib logging through one handler. Call once per process."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_unit_of_work,
            _clip_free_text,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.debug
        else structlog.processors.JSONRenderer(ensure_ascii=False)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_root_handler(renderer))
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
