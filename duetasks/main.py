"""FastAPI application entry point."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from duetasks.config import settings
from duetasks.core.exceptions import StorageError
from duetasks.core.logging import setup_logging
from duetasks.database import init_db, close_db, engine
from duetasks.middleware.metrics import setup_metrics
from duetasks.api.v1 import attachments, auth, board, tasks
from duetasks.services.storage_service import storage_service
from duetasks.utils.clock import clock

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    app.state.clock = clock
    ticker = asyncio.create_task(clock.run())
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    # Shutdown
    ticker.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await ticker
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_metrics(app)

# Include routers
app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])
app.include_router(tasks.router, prefix=f"{settings.API_V1_PREFIX}/tasks", tags=["tasks"])
app.include_router(
    attachments.router,
    prefix=f"{settings.API_V1_PREFIX}/attachments",
    tags=["attachments"],
)
app.include_router(board.router, prefix=f"{settings.API_V1_PREFIX}/board", tags=["board"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    health_status = {
        "status": "ok",
        "checks": {
            "database": "unknown",
            "s3": "unknown",
        },
    }

    # Check database
    try:
        async with engine.begin() as conn:
            await conn.execute(select(1))
        health_status["checks"]["database"] = "ok"
    except SQLAlchemyError as e:
        health_status["checks"]["database"] = f"error: {e}"
        health_status["status"] = "degraded"

    # Check S3
    try:
        storage_service.ensure_bucket(storage_service.default_bucket)
        health_status["checks"]["s3"] = "ok"
    except StorageError as e:
        health_status["checks"]["s3"] = f"error: {e}"
        health_status["status"] = "degraded"

    return health_status
