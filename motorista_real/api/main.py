"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from motorista_real.api.middleware import RequestIDMiddleware, MetricsMiddleware
from motorista_real.api.v1 import app_info, dashboard, session, transactions, users, vehicles
from motorista_real.infrastructure.observability.logging import setup_logging
from motorista_real.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Motorista Real",
        description="Real net profit and dynamic daily goals for app drivers",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
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

    app.include_router(session.router, prefix="/v1", tags=["session"])
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(vehicles.router, prefix="/v1", tags=["vehicles"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(app_info.router, prefix="/v1", tags=["app"])

    return app


app = create_app()
