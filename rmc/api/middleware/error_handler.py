"""
Error responses for the costing API.

Every failure leaves the API as an ``ErrorResponse``: a machine-readable
``error_code``, a message, a recovery hint, optional detail and the path.
Domain errors map to status codes by class; request body validation is 422.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from rmc.application.dto.responses import ErrorResponse
from rmc.config import get_logger
from rmc.core.exceptions import (
    ConsistencyError,
    DatabaseError,
    NotFoundError,
    RMCError,
    ValidationError,
)

logger = get_logger(__name__)

# Checked in order; subclasses before their bases
DOMAIN_STATUS: list[tuple[type[RMCError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConsistencyError, status.HTTP_409_CONFLICT),
    (DatabaseError, status.HTTP_503_SERVICE_UNAVAILABLE),
]

HINTS: dict[str, str] = {
    "RAW_MATERIAL_NOT_FOUND": "List raw materials with GET /api/raw-materials.",
    "RECIPE_NOT_FOUND": "List recipes with GET /api/recipes.",
    "SNAPSHOT_NOT_FOUND": "List the recipe's snapshots with GET /api/recipes/{id}/history.",
    "LOG_ENTRY_NOT_FOUND": "The log entry does not exist or was already purged.",
    "VENDOR_PRICE_NOT_FOUND": "Record a quote with POST /api/raw-materials/{id}/vendor-prices.",
    "CONSISTENCY_ERROR": "Repair with POST /api/raw-materials/{id}/repair for each raw material used.",
    "VALIDATION_ERROR": "Quantities and batch size must be positive; prices must not be negative.",
    "DATABASE_ERROR": "The database is busy or unavailable. Retry the request.",
}

# Codes for framework errors (unknown route, wrong method)
HTTP_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def _status_for(exc: RMCError) -> int:
    for exc_type, code in DOMAIN_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _render(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
    hint: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=hint or HINTS.get(error_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def domain_error_response(request: Request, exc: RMCError) -> JSONResponse:
    """Render a costing engine error with its mapped status."""
    status_code = _status_for(exc)
    detail = "; ".join(f"{key}={value}" for key, value in exc.details.items()) or None

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_rejected",
        path=request.url.path,
        status=status_code,
        error_code=exc.code,
        error=exc.message,
    )
    return _render(request, status_code, exc.code, exc.message, detail=detail)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort handler: unexpected exceptions become a 500 ErrorResponse."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except RMCError as e:
            return domain_error_response(request, e)
        except Exception as e:
            logger.exception("unhandled_error", path=request.url.path, error_type=type(e).__name__)
            return _render(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "Internal server error",
                hint="Check the server logs for this request id.",
            )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain, validation and HTTP error handlers on ``app``."""

    @app.exception_handler(RMCError)
    async def handle_domain_error(request: Request, exc: RMCError) -> JSONResponse:
        return domain_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _render(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            detail="; ".join(problems),
            hint="Check the request body fields and types.",
        )

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
        error_code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        return _render(request, exc.status_code, error_code, str(exc.detail))
