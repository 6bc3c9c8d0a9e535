"""Structured JSON logging with ambient coaching context.

Call sites attach per-record fields as ``ctx_*`` extras. Fields that hold for
a whole unit of work (the request, the plan being built, the exercise being
progressed) are bound once with ``log_context`` and stamped onto every record
emitted inside the block, so a plate-math debug line deep in the loader still
says which template and exercise it belongs to.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

CONTEXT_PREFIX = "ctx_"

_bound_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("log_context", default={})


def current_log_context() -> dict[str, Any]:
    return dict(_bound_context.get())


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to every record logged inside the block; ``None`` values are skipped."""
    merged = {**_bound_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _bound_context.set(merged)
    try:
        yield
    finally:
        _bound_context.reset(token)


class ContextFilter(logging.Filter):
    """Copy bound context onto records; explicit ``ctx_*`` extras win."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _bound_context.get().items():
            attr = CONTEXT_PREFIX + key
            if not hasattr(record, attr):
                setattr(record, attr, value)
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for production observability."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }
        context = {
            key[len(CONTEXT_PREFIX):]: value
            for key, value in sorted(record.__dict__.items())
            if key.startswith(CONTEXT_PREFIX)
        }
        if context:
            log_entry["context"] = context
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging to stdout.

    Safe to call repeatedly: the stdout handler is installed once and every
    root handler gets exactly one ``ContextFilter``.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Reduce noise from the ASGI server
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            logging.getLogger(name).setLevel(logging.WARNING)

    for handler in root.handlers:
        if not any(isinstance(f, ContextFilter) for f in handler.filters):
            handler.addFilter(ContextFilter())


def get_logger(name: str) -> logging.Logger:
    """Get a named logger for a module."""
    return logging.getLogger(name)
