"""Exception handlers that render every failure as the EduConnect error envelope.

Body shape::

    {"success": false,
     "error": {"code": ..., "message": ..., "details": {...}},
     "timestamp": ..., "path": ...}
"""

import logging
import traceback
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException

logger = logging.getLogger(__name__)

_VERBOSE_ENVIRONMENTS = {"development", "dev", "test"}


def create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: dict = None,
    path: str = None,
    headers: dict = None,
) -> JSONResponse:
    content = {
        "success": False,
        "error": {"code": error_code, "message": message, "details": details or {}},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if path:
        content["path"] = path
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(content), headers=headers
    )


def _log_failure(request: Request, level: int, message: str, exc_info=False, **extra) -> None:
    extra.update(path=request.url.path, method=request.method)
    logger.log(level, message, extra=extra, exc_info=exc_info)


def _is_verbose(request: Request) -> bool:
    environment = getattr(request.app.state, "environment", "production")
    return str(environment).lower() in _VERBOSE_ENVIRONMENTS


def _status_code_name(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase.lower().replace(" ", "_").replace("-", "_")
    except ValueError:
        return "http_error"


async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    _log_failure(
        request, level, "%s: %s" % (exc.error_code, exc.message), error_code=exc.error_code
    )
    return create_error_response(
        exc.status_code,
        exc.error_code,
        exc.message,
        details=exc.details,
        path=request.url.path,
        headers=exc.headers,
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Unknown routes, wrong methods and the readiness check."""
    if isinstance(exc.detail, dict):
        message, details = HTTPStatus(exc.status_code).phrase, exc.detail
    else:
        message, details = str(exc.detail), {}
    _log_failure(request, logging.WARNING, "HTTP %s: %s" % (exc.status_code, message))
    return create_error_response(
        exc.status_code,
        _status_code_name(exc.status_code),
        message,
        details=details,
        path=request.url.path,
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    _log_failure(request, logging.WARNING, "Rejected request body", errors=errors)
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        details={"errors": errors},
        path=request.url.path,
    )


async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    client_ip = request.client.host if request.client else "unknown"
    _log_failure(request, logging.WARNING, "Rate limit hit by %s" % client_ip, client_ip=client_ip)
    return create_error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "rate_limit_exceeded",
        "Too many requests. Please try again later.",
        details={"retry_after": str(exc.detail)},
        path=request.url.path,
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Approvals and enrollments roll back before re-raising, so nothing is half applied.
    _log_failure(
        request,
        logging.ERROR,
        "Database error: %s" % exc,
        exc_info=True,
        error_type=type(exc).__name__,
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "database_error",
        "A database error occurred. Please try again later.",
        path=request.url.path,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    _log_failure(
        request,
        logging.ERROR,
        "Unhandled exception: %s" % exc,
        exc_info=True,
        error_type=type(exc).__name__,
    )
    message = "An unexpected error occurred. Please try again later."
    details = {}
    if _is_verbose(request):
        message = str(exc)
        details = {
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc().split("\n"),
        }
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_server_error",
        message,
        details=details,
        path=request.url.path,
    )


EXCEPTION_HANDLERS = (
    (AppException, handle_app_exception),
    (StarletteHTTPException, handle_http_exception),
    (RequestValidationError, handle_validation_error),
    (RateLimitExceeded, handle_rate_limit),
    (SQLAlchemyError, handle_database_error),
    (Exception, handle_unexpected_error),
)


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, handler)
