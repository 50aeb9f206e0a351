"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from collections_kpi.api.middleware import RequestIDMiddleware, MetricsMiddleware
from collections_kpi.api.v1 import analytics, mapping, settings as settings_routes
from collections_kpi.infrastructure.database.session import init_db
from collections_kpi.infrastructure.observability.logging import setup_logging
from collections_kpi.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Collections KPI Engine",
        description="DSO, CEI, collector scorecards and customer risk for AR invoice sheets",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])
    app.include_router(mapping.router, prefix="/v1", tags=["mapping"])
    app.include_router(settings_routes.router, prefix="/v1", tags=["settings"])

    return app


app = create_app()
