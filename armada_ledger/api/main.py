"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from armada_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from armada_ledger.api.v1 import activity_logs, dashboard, investors, reports, transactions, units
from armada_ledger.infrastructure.observability.logging import setup_logging
from armada_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Armada Ledger",
        description="Vehicle investment, sales and profit-sharing service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(investors.router, prefix="/v1", tags=["investors"])
    app.include_router(units.router, prefix="/v1", tags=["units"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(activity_logs.router, prefix="/v1", tags=["activity-logs"])

    return app


app = create_app()
