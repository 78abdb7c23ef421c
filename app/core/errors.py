# app/core/errors.py
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Base class for errors raised by services.

    Services never build HTTP responses themselves; every AppError is
    translated to the stable envelope by the handlers registered in
    `register_exception_handlers`:

        {"success": false, "message": "...", "errors": [...]}
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        errors: list[dict[str, str]] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationError(AppError):
    """Malformed or missing input. Carries field-level detail."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    """Acting user lacks ownership or role."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientStockError(ConflictError):
    """A product cannot cover the requested quantity."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_id: Any, product_name: str | None = None):
        self.product_id = product_id
        self.product_name = product_name
        label = product_name or str(product_id)
        super().__init__(
            f"Insufficient stock for {label}",
            errors=[{"field": "items", "message": f"Insufficient stock for {label}"}],
        )


class CapacityError(ConflictError):
    """A cart line would exceed the per-line quantity cap."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(ConflictError):
    """Order or purchase status change not allowed from the current status."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(
    message: str,
    errors: list[dict[str, str]] | None = None,
    detail: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if detail and get_settings().is_development:
        body["error"] = detail
    return body


def _field_path(loc: tuple) -> str:
    # drop the "body"/"query" prefix FastAPI puts in front
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "request"


def field_errors_from_pydantic(errors: list[dict], prefix: str = "") -> list[dict[str, str]]:
    """
    Flatten pydantic error dicts into [{"field": ..., "message": ...}].
    """
    out: list[dict[str, str]] = []
    for err in errors:
        field = _field_path(tuple(err.get("loc", ())))
        if prefix:
            field = f"{prefix}.{field}" if field != "request" else prefix
        out.append({"field": field, "message": err.get("msg", "Invalid value")})
    return out


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("Internal server error", detail=exc.message),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.errors),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "Validation failed",
            field_errors_from_pydantic(list(exc.errors())),
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", detail=str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
