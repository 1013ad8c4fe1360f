from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from membership.api.admin import router as admin_router
from membership.api.credentials import router as credentials_router
from membership.api.errors import register_error_handlers
from membership.api.health import router as health_router
from membership.api.memberships import router as memberships_router
from membership.api.metrics_endpoint import router as metrics_router
from membership.api.terms import router as terms_router
from membership.core.config import SETTINGS
from membership.core.logging import setup_logging
from membership.db.redis import lifespan_redis
from membership.middleware.metrics import MetricsMiddleware
from membership.middleware.request_context import RequestContextMiddleware

setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_redis():
        yield


app = FastAPI(
    title="membership-ledger",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last added runs first: RequestContext → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

register_error_handlers(app)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(memberships_router)
app.include_router(credentials_router)
app.include_router(terms_router)
app.include_router(admin_router)

logger.info(
    "membership-ledger started  env=%s price=%d duration=%ds docs=%s",
    SETTINGS.app_env,
    SETTINGS.membership_price,
    SETTINGS.membership_duration_seconds,
    "on" if SETTINGS.is_dev else "off",
)
