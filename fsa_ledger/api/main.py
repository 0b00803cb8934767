"""FastAPI application factory"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fsa_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fsa_ledger.api.v1 import accounts, employees
from fsa_ledger.infrastructure.database.session import LedgerStore
from fsa_ledger.infrastructure.observability.logging import setup_logging
from fsa_ledger.config import settings


def create_app(store: Optional[LedgerStore] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    The ledger store is created here unless one is supplied, and disposed
    when the application shuts down.
    """
    setup_logging(settings.log_level)
    store = store or LedgerStore(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.store.dispose()

    app = FastAPI(
        title="FSA Ledger",
        description="Dependent care FSA accounts, allocations and usage reporting",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

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
    app.include_router(accounts.router, tags=["fsa-accounts"])
    app.include_router(employees.router, tags=["employees"])

    return app
