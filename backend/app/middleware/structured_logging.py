# backend/app/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("casa.request")


def credential_kind(headers: Headers) -> str:
    """cron | bearer | none. Only the kind is logged, never the value."""
    if headers.get("X-Cron-Secret"):
        return "cron"
    if (headers.get("Authorization") or "").lower().startswith("bearer "):
        return "bearer"
    return "none"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """One `http_request` line per request; the JSON formatter adds the request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request %s %s -> %d",
                request.method,
                request.url.path,
                status_code,
                extra={
                    "http": {
                        "method": request.method,
                        "path": request.url.path,
                        "query": request.url.query or "",
                        "status_code": status_code,
                        "latency_ms": int((time.perf_counter() - started) * 1000),
                        "credential": credential_kind(request.headers),
                    }
                },
            )
