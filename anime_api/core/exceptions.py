from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

from anime_api.core.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error with consistent schema."""

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InvalidInputError(AppError):
    """Caller-supplied data failed validation or sanitization."""

    def __init__(self, message: str = "Invalid input", details: dict[str, Any] | None = None):
        super().__init__(message, code="INVALID_INPUT", status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvalidResultError(AppError):
    """A page returned by the store is structurally impossible."""

    def __init__(self, message: str = "Invalid result page", details: dict[str, Any] | None = None):
        super().__init__(message, code="INVALID_RESULT", status_code=status.HTTP_400_BAD_REQUEST, details=details)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found", details: dict[str, Any] | None = None):
        super().__init__(message, code="NOT_FOUND", status_code=status.HTTP_404_NOT_FOUND, details=details)


class QueryTimeoutError(AppError):
    def __init__(self, message: str = "Query timed out", details: dict[str, Any] | None = None):
        super().__init__(
            message, code="QUERY_TIMEOUT", status_code=status.HTTP_503_SERVICE_UNAVAILABLE, details=details
        )


def _with_request_id(request: Request, body: dict[str, Any]) -> dict[str, Any]:
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return body


def error_response(request: Request, exc: AppError) -> ORJSONResponse:
    body = {
        "error": {
            "message": exc.message,
            "code": exc.code,
            "details": exc.details,
        }
    }
    return ORJSONResponse(status_code=exc.status_code, content=_with_request_id(request, body))


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    log.warning("app_error", code=exc.code, message=exc.message, path=request.url.path)
    return error_response(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    errors = exc.errors()
    fields = [".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query", "path")) for e in errors]
    log.warning("validation_error", fields=fields, path=request.url.path)
    body = {
        "error": {
            "message": "Validation error",
            "code": "VALIDATION_ERROR",
            "details": {
                "fields": fields,
                "messages": [e.get("msg", "") for e in errors],
            },
        }
    }
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_with_request_id(request, body),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    log.exception("unhandled_exception", exc_info=exc)
    body = {
        "error": {
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": {},
        }
    }
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_with_request_id(request, body),
    )
