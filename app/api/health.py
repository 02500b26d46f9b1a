"""Liveness and readiness probes.

/health always answers 200 while the process is up; the body says whether
the optional Redis backend is reachable and how many rows the store holds.
/ready answers 200 as soon as the app can serve, since every dependency
has an in-process fallback.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from app.db.redis import redis_pool
from app.services.store import store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    checks: dict[str, str] = {}
    overall = "ok"

    if redis_pool is not None:
        try:
            await redis_pool.ping()  # type: ignore[misc]
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "degraded"
            overall = "degraded"
    else:
        checks["redis"] = "not_configured"

    return {
        "status": overall,
        "checks": checks,
        "store": {
            "users": store.count_users(),
            "courses": store.count_courses(),
            "enrollments": len(store.list_enrollments()),
            "messages": len(store.list_messages()),
        },
    }


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
