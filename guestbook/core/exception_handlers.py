"""Global exception handlers for consistent error responses.

Browsers get opaque, empty-bodied responses for failures: nothing about
storage or internals leaks to the client, while the log carries the details.

Design:
- ValidationAppError → 400
- StorageAppError and any other AppError → 500
- Unexpected Exception → 500 (safety net)
"""

import logging

from fastapi import Request, Response

from guestbook.core.errors import AppError, ValidationAppError
from guestbook.core.logging import get_request_id

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> Response:
    """Map domain errors to an empty response with the right status.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        Empty Response carrying 400 for validation errors, 500 otherwise.
    """
    status_code = 400 if isinstance(exc, ValidationAppError) else 500

    log = logger.warning if status_code < 500 else logger.error
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "details": exc.details,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return Response(status_code=status_code)


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Fallback handler for unexpected errors.

    Logs the exception type and message; the client only sees an empty 500.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return Response(status_code=500)


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Specific handlers are registered before the general fallback.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
