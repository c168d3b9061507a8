from __future__ import annotations

"""Application factory for the guestbook FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from fastapi import FastAPI

from guestbook.api.routes import guestbook_router, health_router
from guestbook.core.config import settings
from guestbook.core.exception_handlers import setup_exception_handlers
from guestbook.core.logging import configure_logging
from guestbook.core.middleware import request_id_middleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Guestbook",
        description=(
            "A small public guestbook. Messages are throttled per client IP and "
            "rejected when blank, profane or containing links."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        docs_url=None,
        redoc_url=None,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(guestbook_router)
    app.include_router(health_router)

    return app
