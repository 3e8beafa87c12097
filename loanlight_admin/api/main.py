"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from loanlight_admin.api.middleware import MetricsMiddleware, RequestIDMiddleware
from loanlight_admin.api.v1 import auth, clients, dashboard, notify, reports, uploads
from loanlight_admin.config import settings
from loanlight_admin.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="LoanLight Admin",
        description="Microfinance dashboard aggregation, reporting and client management service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(uploads.router, prefix="/v1", tags=["uploads"])
    app.include_router(notify.router, prefix="/v1", tags=["notify"])
    app.include_router(auth.router, prefix="/v1", tags=["auth"])

    return app


app = create_app()
