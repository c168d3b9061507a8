from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from guestbook.api.dependencies import get_submission_service
from guestbook.api.rendering import render_error, render_index
from guestbook.core.config import settings
from guestbook.core.identity import format_remote_addr
from guestbook.core.rate_limit import hold_connection
from guestbook.schemas.submission import MODERATION_REJECTIONS, SubmissionKind
from guestbook.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Guestbook"])

LISTING_PATH = "/"


@router.get(LISTING_PATH, response_class=HTMLResponse)
async def home(
    request: Request,
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> Response:
    """Guestbook listing page.

    Shows the newest entries (APP_LISTING_LIMIT) and the total count. Storage
    failures propagate as StorageAppError and become an empty 500.
    """
    guests, total = await run_in_threadpool(
        service.list_entries, settings.app.listing_limit
    )
    return render_index(request, guests, total)


@router.post(LISTING_PATH)
async def create(
    request: Request,
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> Response:
    """Sign the guestbook.

    Accepts a form-encoded ``message`` field (repeated values are joined).

    Returns:
        302 redirect to the listing when accepted; 400 with a rendered error
        for blank, profane or link-containing messages; empty 400 when the
        field is missing; empty 500 on internal failures. Throttled clients
        are held for APP_RATE_LIMIT_DELAY_SECONDS and get an empty 200.
    """
    try:
        form = await request.form()
    except Exception as exc:
        logger.error(
            "submission.form_parse_failed",
            extra={"error_type": type(exc).__name__},
        )
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    values = form.getlist("message") if "message" in form else None
    client = request.client
    remote_addr = format_remote_addr(
        client.host if client else None,
        client.port if client else None,
    )

    result = await run_in_threadpool(
        service.submit,
        values,
        forwarded_for=request.headers.get("X-Forwarded-For"),
        remote_addr=remote_addr,
    )

    if result.kind is SubmissionKind.ACCEPTED:
        return RedirectResponse(LISTING_PATH, status_code=status.HTTP_302_FOUND)

    if result.kind in MODERATION_REJECTIONS:
        return render_error(request, result.message or "", status.HTTP_400_BAD_REQUEST)

    if result.kind is SubmissionKind.MISSING_FIELD:
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    if result.kind is SubmissionKind.RATE_LIMITED:
        await hold_connection(
            settings.app.rate_limit_delay_seconds,
            request.is_disconnected,
        )
        return Response(status_code=status.HTTP_200_OK)

    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
