"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from budget_insights.api.middleware import RequestIDMiddleware, MetricsMiddleware
from budget_insights.api.v1 import alerts, budget, gamification
from budget_insights.infrastructure.observability.logging import setup_logging
from budget_insights.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Budget Insights",
        description="Month-end projection, no-spend streaks, weekly missions and smart alerts",
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

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(budget.router, prefix="/v1", tags=["budget"])
    app.include_router(alerts.router, prefix="/v1", tags=["alerts"])
    app.include_router(gamification.router, prefix="/v1", tags=["gamification"])

    return app


app = create_app()
