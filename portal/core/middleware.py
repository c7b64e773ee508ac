"""CORS and request tracing middleware.

Each request gets an id, either the caller's ``X-Request-Id`` or a fresh
one. It is echoed on the response, written on the access log line and
exposed through :func:`current_request_id` so activity entries recorded
while handling the request can carry it.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from portal.core.config import settings

logger = logging.getLogger("municipal_portal")

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 64

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def current_request_id() -> Optional[str]:
    """Id of the request being handled, or None outside a request."""
    return _request_id.get()


def accepted_request_id(value: Optional[str]) -> str:
    """Keep a caller-supplied id if it is short and printable, else mint one."""
    if value and len(value) <= MAX_REQUEST_ID_LENGTH and value.isprintable():
        return value
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = _request_id.set(request_id)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            _request_id.reset(token)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-Ms"] = str(elapsed_ms)

        user_id = getattr(request.state, "user_id", None)
        logger.info(
            "[%s] %s %s -> %s in %sms (user=%s)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            user_id if user_id is not None else "-",
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Content-Disposition"],
    )
    app.add_middleware(RequestIdMiddleware)
