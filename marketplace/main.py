"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.config import settings
from marketplace.database import create_db_and_tables
from marketplace.errors import MarketplaceError
from marketplace.utils.logging import setup_logging
from marketplace.api import transactions, credibility, notifications, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    from marketplace.services.factory import init_lifecycle, shutdown_lifecycle
    init_lifecycle()

    from marketplace.engine.scheduler import start_scheduler, stop_scheduler
    if settings.scheduler_enabled:
        start_scheduler()

    yield

    stop_scheduler()
    shutdown_lifecycle()


app = FastAPI(
    title="Marketplace Transactions",
    description="Transaction lifecycle and credibility scoring for a peer-to-peer marketplace",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Caller-facing lifecycle errors become JSON with the error's status code."""
    logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


# Mount routers
app.include_router(transactions.router)
app.include_router(credibility.router)
app.include_router(notifications.router)
app.include_router(system.router)
