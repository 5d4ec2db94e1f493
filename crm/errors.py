"""CRM exception taxonomy and the JSON error envelope handlers."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class CRMError(Exception):
    """Base exception for CRM service errors."""

    status_code = 500

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthenticationError(CRMError):
    """No tenant / user context on the request."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated", details: Any = None):
        super().__init__(message, details)


class ValidationError(CRMError):
    status_code = 400


class NotFoundError(CRMError):
    status_code = 404


class ConflictError(CRMError):
    status_code = 409


class UnsupportedOperationError(CRMError):
    """Requested operation exists in the schema but is not implemented yet."""

    status_code = 400


def _validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ctx may hold raw exception objects that are not JSON serializable
    return [
        {key: value for key, value in err.items() if key not in ("ctx", "url")}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as an ``{"error": ..., "details"?: ...}`` body."""

    @app.exception_handler(CRMError)
    async def handle_crm_error(request: Request, exc: CRMError):
        if isinstance(exc, AuthenticationError):
            logger.warning("Authentication failed for %s: %s", request.url.path, exc.message)
        return JSONResponse(jsonable_encoder(exc.to_dict()), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            jsonable_encoder({"error": "Invalid payload", "details": _validation_details(exc)}),
            status_code=400,
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
