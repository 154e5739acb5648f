# backend/app/middleware/request_id.py
"""
Correlation ids for log lines.

HTTP requests take theirs from X-Request-ID (or get a fresh one). Scheduled
and CLI sweeps bind one with `bound_request_id` so every log line written
during a sweep can be grouped.
"""
from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_current_request_id: ContextVar[Optional[str]] = ContextVar("casa_request_id", default=None)


def get_request_id() -> Optional[str]:
    return _current_request_id.get()


@contextmanager
def bound_request_id(request_id: Optional[str] = None, *, prefix: str = "") -> Iterator[str]:
    rid = request_id or f"{prefix}{uuid.uuid4()}"
    token = _current_request_id.set(rid)
    try:
        yield rid
    finally:
        _current_request_id.reset(token)


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
        with bound_request_id(incoming or None) as rid:
            request.state.request_id = rid
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
