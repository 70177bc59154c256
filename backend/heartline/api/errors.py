"""Global error handlers rendering the failure envelope with the request_id."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from heartline.api.request_id import get_request_id
from heartline.domain.common.errors import DomainError
from heartline.infra.rate_limit import RateLimitExceeded
from heartline.settings import settings

logger = logging.getLogger(__name__)


def _failure(
    request: Request,
    status_code: int,
    message: str,
    *,
    reason: Optional[str] = None,
    errors: Optional[list[Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    payload: dict[str, Any] = {
        "status": "fail" if status_code < 500 else "error",
        "message": message,
        "reason": reason or message,
        "request_id": get_request_id(request),
    }
    if errors:
        payload["errors"] = jsonable_encoder(errors)
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_exc_handler(request: Request, exc: DomainError):  # type: ignore[override]
        return _failure(request, exc.status_code, exc.message, reason=exc.reason, errors=exc.errors)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):  # type: ignore[override]
        return _failure(request, exc.status_code, "Too many requests", reason=exc.reason)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        detail = exc.detail if isinstance(exc.detail, str) else "http_error"
        return _failure(request, exc.status_code, detail, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return _failure(request, 400, "Invalid request", reason="validation_error", errors=errors)

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
        logger.exception("unhandled_exception", extra={"path": request.url.path})
        message = str(exc) if settings.is_dev() and str(exc) else "Internal server error"
        return _failure(request, 500, message, reason="internal_error")
