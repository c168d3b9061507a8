"""HTML rendering for the guestbook pages.

The submission pipeline only produces error strings; turning them into pages
happens here, on top of Jinja2 templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from guestbook.schemas.guest import GuestEntry

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_index(
    request: Request, guests: Sequence[GuestEntry], total: int
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"guests": guests, "total": total},
    )


def render_error(request: Request, message: str, status_code: int = 400) -> HTMLResponse:
    """Render the error page with a human-readable message."""
    return templates.TemplateResponse(
        request,
        "error.html",
        {"error_message": message},
        status_code=status_code,
    )
