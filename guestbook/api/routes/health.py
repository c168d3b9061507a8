from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check for load balancers and monitoring.

    Does not touch storage, so a slow database never fails the check.

    Returns:
        dict: ``{"status": "ok"}``.
    """

    return {"status": "ok"}
