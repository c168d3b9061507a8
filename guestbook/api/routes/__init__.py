from __future__ import annotations

from guestbook.api.routes.guestbook import router as guestbook_router
from guestbook.api.routes.health import router as health_router

__all__ = ["guestbook_router", "health_router"]
