"""Request logging middleware.

One log line per request: method, path, status, duration, acting user (when
the auth dependency resolved one) and a request id, which is echoed back in
the X-Request-ID header. At DEBUG level JSON bodies are logged with
credential fields replaced by "[REDACTED]".

This is operational logging only; audit entries are written by the services.
"""

from __future__ import annotations

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = frozenset({
    "password",
    "password_confirmation",
    "current_password",
    "new_password",
    "token",
    "api_key",
    "secret",
})

REDACTED = "[REDACTED]"


def redact(value):
    """Return a copy of `value` with sensitive keys masked at any depth."""
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and k.lower() in SENSITIVE_KEYS else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        if logger.isEnabledFor(logging.DEBUG):
            await self._log_body(request, request_id)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        user_id = getattr(request.state, "user_id", None)
        logger.info(
            "%s %s -> %d (%.1f ms) user=%s request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            user_id or "-",
            request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    async def _log_body(request: Request, request_id: str) -> None:
        if "application/json" not in request.headers.get("content-type", ""):
            return
        raw = await request.body()
        if not raw:
            return
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.debug("request_id=%s body=<unparseable %d bytes>", request_id, len(raw))
            return
        logger.debug("request_id=%s body=%s", request_id, json.dumps(redact(payload)))
