"""HTTP middleware for request ID propagation and timing.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from guestbook.core.config import settings
from guestbook.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Tag every request/response pair with a correlation ID.

    The incoming header (LOG_REQUEST_ID_HEADER, default X-Request-ID) is
    reused when present, otherwise a UUID4 is generated. The ID lives in
    contextvars for the request's lifetime so every log line carries it, and
    is echoed back together with X-Request-Duration-ms. Throttled submissions
    show their full hold time in the duration header.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with correlation headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
