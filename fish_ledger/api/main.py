"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fish_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fish_ledger.api.v1 import customers, products, summary, transactions
from fish_ledger.domain.locks import TransactionLocks
from fish_ledger.infrastructure.database.models import Base
from fish_ledger.infrastructure.database.session import engine
from fish_ledger.infrastructure.observability.logging import setup_logging
from fish_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fish Ledger",
        description="Customer bills and partial payments in integer paise",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Payments on the same transaction serialize through this registry
    app.state.transaction_locks = TransactionLocks(settings.payment_lock_timeout_seconds)

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
    app.include_router(customers.router, prefix=settings.api_prefix, tags=["customers"])
    app.include_router(products.router, prefix=settings.api_prefix, tags=["fish"])
    app.include_router(transactions.router, prefix=settings.api_prefix, tags=["transactions"])
    app.include_router(summary.router, prefix=settings.api_prefix, tags=["summary"])

    return app


app = create_app()
