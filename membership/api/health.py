"""Liveness and readiness endpoints.

/health always answers 200 while the process is up; ``status`` reports
"degraded" when a configured dependency is unreachable.  /ready answers
503 while issuance is impossible because Redis is configured but down.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from membership.api.dependencies import Service
from membership.db.redis import redis_pool

router = APIRouter(tags=["health"])


async def _redis_status() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        return "degraded"
    return "ok"


@router.get("/health")
async def health(service: Service) -> dict:
    checks = {"redis": await _redis_status()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {
        "status": overall,
        "checks": checks,
        "ledger": {
            "total_issued": service.ledger.total_issued,
            "holders": service.ledger.holder_count,
            "paused": service.gate.is_paused(),
        },
    }


@router.get("/ready")
async def ready() -> Response:
    if await _redis_status() == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
