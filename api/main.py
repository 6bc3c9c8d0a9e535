from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from api.observability import configure_logging, monotonic_ms, new_request_id, request_log_fields
from api.routes import router
from liftcoach.config import get_settings
from liftcoach.logging_config import log_context

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Lift Coach API", version="0.1.0")
    app.include_router(router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_and_logging(request: Request, call_next: Callable) -> Response:
        header_name = settings.request_id_header_name or "X-Request-ID"
        request_id = (request.headers.get(header_name) or "").strip() or new_request_id()
        client_ip = getattr(request.client, "host", None)
        # Route and service logs inherit the request id, method and path.
        with log_context(request_id=request_id, method=request.method, path=request.url.path):
            started_ms = monotonic_ms()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "http_request_error",
                    extra=request_log_fields(
                        status_code=500, duration_ms=monotonic_ms() - started_ms, client_ip=client_ip
                    ),
                )
                raise
            response.headers[header_name] = request_id
            logger.info(
                "http_request",
                extra=request_log_fields(
                    status_code=response.status_code, duration_ms=monotonic_ms() - started_ms, client_ip=client_ip
                ),
            )
            return response

    return app


app = create_app()
