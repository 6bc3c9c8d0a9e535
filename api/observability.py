from __future__ import annotations

import time
from typing import Optional
from uuid import uuid4

from liftcoach.logging_config import setup_logging


def new_request_id() -> str:
    return uuid4().hex


def configure_logging(level: str = "INFO") -> None:
    setup_logging(level)


def request_log_fields(*, status_code: int, duration_ms: float, client_ip: Optional[str]) -> dict[str, object]:
    """Per-response extras; method, path and request id come from the bound log context."""
    return {
        "ctx_status_code": int(status_code),
        "ctx_duration_ms": round(float(duration_ms), 2),
        "ctx_client_ip": client_ip or "",
    }


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0
