"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from billing_core.api.middleware import RequestIDMiddleware, MetricsMiddleware
from billing_core.api.v1 import expenses, invoices, job_orders, reports, salaries
from billing_core.infrastructure.database.session import init_db
from billing_core.infrastructure.observability.logging import setup_logging
from billing_core.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Billing Core",
        description="Job orders, invoices, expenses and sales reports",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
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
    app.include_router(job_orders.router, prefix="/v1", tags=["job-orders"])
    app.include_router(invoices.router, prefix="/v1", tags=["invoices"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])
    app.include_router(salaries.router, prefix="/v1", tags=["salaries"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
