"""Logging setup bridging stdlib logging, loguru and structlog."""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from types import FrameType
from typing import Any, Iterator, Mapping

import structlog
from loguru import logger as loguru_logger

__all__ = [
    "configure_logging",
    "generate_request_id",
    "get_logger",
    "get_request_id",
    "request_context",
]

_REQUEST_ID: ContextVar[str | None] = ContextVar("request_id", default=None)
_CONFIGURED = False
_SERVICE_NAME: str | None = None


def _format_line(record: Mapping[str, Any]) -> str:
    """Render a loguru record as a single pipe separated line."""

    extra = record.get("extra") or {}
    service = extra.get("service", "-")
    request_id = extra.get("request_id", "-")
    message = str(record.get("message", ""))
    # loguru runs str.format over the returned template; JSON payloads carry braces.
    message = message.replace("{", "{{").replace("}", "}}")
    return (
        f"{record['time'].isoformat()} | {record['level'].name:<8} | "
        f"{service} | {request_id} | {message}\n"
    )


def _resolve_level(level: str | int) -> tuple[int, str]:
    if isinstance(level, int):
        numeric = level
    else:
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
    return numeric, logging.getLevelName(numeric)


def get_request_id() -> str | None:
    """Return the request identifier bound to the current context, if any."""

    return _REQUEST_ID.get()


def generate_request_id() -> str:
    """Return a new opaque request identifier."""

    return uuid.uuid4().hex


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - thin wrapper
        level: str | int
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        bound = loguru_logger.bind(logger=record.name)
        request_id = get_request_id()
        if request_id:
            bound = bound.bind(request_id=request_id)
        bound.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(
    *, service_name: str | None = None, level: str | int = "INFO", json_logs: bool = True
) -> None:
    """Install the loguru sink and structlog processors once per process.

    Later calls only update ``service_name``, which is attached to every
    structured entry. ``json_logs=False`` renders structlog events for a
    terminal instead of as JSON.
    """

    global _CONFIGURED, _SERVICE_NAME

    numeric_level, level_name = _resolve_level(level)

    if not _CONFIGURED:
        loguru_logger.remove()
        loguru_logger.add(
            sys.stdout,
            level=level_name,
            backtrace=False,
            diagnose=False,
            format=_format_line,
        )
        logging.basicConfig(handlers=[InterceptHandler()], level=numeric_level, force=True)
        logging.captureWarnings(True)

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
                if json_logs
                else structlog.dev.ConsoleRenderer(colors=False),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _CONFIGURED = True

    if service_name:
        _SERVICE_NAME = service_name
        loguru_logger.configure(extra={"service": service_name})
        structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog bound logger."""

    return structlog.get_logger(name) if name else structlog.get_logger()


@contextmanager
def request_context(request_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Bind a request identifier and ``extra`` values for the block.

    Context variables that were bound before entering are restored on exit.
    """

    extra.pop("request_id", None)
    rid = request_id or generate_request_id()
    token = _REQUEST_ID.set(rid)

    values = dict(extra)
    if _SERVICE_NAME:
        values.setdefault("service", _SERVICE_NAME)
    keys = ["request_id", *values]

    previous = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(request_id=rid, **values)
    try:
        with loguru_logger.contextualize(request_id=rid, **extra):
            yield rid
    finally:
        structlog.contextvars.unbind_contextvars(*keys)
        restore = {key: previous[key] for key in keys if key in previous}
        if restore:
            structlog.contextvars.bind_contextvars(**restore)
        _REQUEST_ID.reset(token)
