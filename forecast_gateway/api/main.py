"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from forecast_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from forecast_gateway.api.v1 import forecast
from forecast_gateway.infrastructure.observability.logging import setup_logging
from forecast_gateway.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Balance Forecast Gateway",
        description="Projected low balance before the next paycheck",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])

    return app


app = create_app()
