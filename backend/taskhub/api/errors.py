"""Boundary translation from service results and framework errors to JSON.

Every error body has the shape {"success": false, "message": ...}, plus
"errors" (field -> messages) for validation failures.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskhub.errors import ServiceError
from taskhub.services.result import Err, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceFailure(Exception):
    """Raised by `unwrap()` to carry a service error to the exception handler."""

    def __init__(self, error: ServiceError) -> None:
        super().__init__(error.message)
        self.error = error


def unwrap(result: Result[T]) -> T:
    if isinstance(result, Err):
        raise ServiceFailure(result.error)
    return result.value


def error_body(error: ServiceError) -> dict:
    body: dict = {"success": False, "message": error.message}
    errors = getattr(error, "errors", None)
    if errors:
        body["errors"] = errors
    return body


def _field_name(loc: tuple) -> str:
    # ("body", "assigned_to") -> "assigned_to"; ("query", "page") -> "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(err.get("msg", "Invalid value."))
    return errors


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceFailure)
    async def service_failure_handler(request: Request, exc: ServiceFailure):
        if exc.error.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.error.message)
        return JSONResponse(status_code=exc.error.status_code, content=error_body(exc.error))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"success": False, "message": "Validation Error", "errors": validation_errors(exc)},
        )

    # Prevent internal details from leaking
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error."},
        )
