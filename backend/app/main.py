# This file bootstraps the FastAPI app, wires up middlewares for
# logging/metrics/request ids, sets up CORS, and includes the routers.
# Routes are served under both /api/v1 and /api.

import os

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app import models  # noqa: F401  registers every table on Base
from app.core.config import settings
from app.core.db import Base, engine
from app.core.logging import APILoggingMiddleware, configure_logging
from app.core.metrics import MetricsMiddleware
from app.core.startup_checks import run_startup_checks
from app.core.versioning import API_PREFIX, API_V1_PREFIX
from app.scope.middleware import RequestContextMiddleware

from app.api.config import router as config_router
from app.api.dependencies import get_webhook_dispatcher
from app.api.verifications import router as verifications_router
from app.api.webhooks import router as webhooks_router

configure_logging()

# Create DB tables right away so the app doesn't hit missing
# schema issues later. Alembic owns the schema when SKIP_MIGRATIONS=1.
if os.getenv("SKIP_MIGRATIONS") != "1":
    Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME)


@app.on_event("startup")
def _run_startup_checks() -> None:
    run_startup_checks()


@app.on_event("shutdown")
def _stop_webhook_pool() -> None:
    get_webhook_dispatcher().shutdown(wait=False)


# Observability layers. The request context middleware is added last so
# it runs first and every other layer sees the request id.
app.add_middleware(APILoggingMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

if settings.CORS_ALLOW_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

api_v1 = APIRouter(prefix=API_V1_PREFIX)
api_legacy = APIRouter(prefix=API_PREFIX)

routers = [
    verifications_router,
    webhooks_router,
    config_router,
]

for r in routers:
    api_v1.include_router(r)
    api_legacy.include_router(r)

app.include_router(api_v1)
app.include_router(api_legacy)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
