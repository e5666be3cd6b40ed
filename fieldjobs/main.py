from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.health import router as health_router
from .api.jobs import router as jobs_router
from .config import (
    API_PREFIX, API_VERSION, APP_PORT, AUTO_MIGRATE, DATABASE_URL,
    REEVALUATE_ENABLED, REEVALUATE_INTERVAL_SECONDS,
)
from .core import SystemClock
from .db import SessionLocal, init_db
from .logging_config import setup_logging
from .middleware import TracingMiddleware
from .services.jobs import configured_thresholds
from .services.scheduler import ReevaluationScheduler

# Configure logging at import time
setup_logging()

logger = logging.getLogger("fieldjobs")
logger.info("startup: logging configured", extra={"component": "api"})

def _auto_migrate():
    import subprocess
    try:
        subprocess.run(["alembic", "upgrade", "head"], check=True)
        logger.info("Alembic auto-migrate: upgrade head OK")
    except (OSError, subprocess.CalledProcessError):
        logger.exception("Alembic auto-migrate failed")
        raise

@asynccontextmanager
async def lifespan(application: FastAPI):
    # Startup
    logger.info("Field Jobs API starting up", extra={
        "details": "Initializing database and re-evaluation scheduler",
        "component": "api"
    })

    if AUTO_MIGRATE:
        _auto_migrate()
    else:
        init_db()

    if getattr(application.state, "clock", None) is None:
        application.state.clock = SystemClock()

    application.state.scheduler = ReevaluationScheduler(
        session_factory=SessionLocal,
        clock=application.state.clock,
        interval_seconds=REEVALUATE_INTERVAL_SECONDS,
        thresholds=configured_thresholds(),
    )
    if REEVALUATE_ENABLED:
        application.state.scheduler.start()

    logger.info("Field Jobs API ready", extra={
        "details": "All services started successfully",
        "reevaluate_enabled": REEVALUATE_ENABLED,
        "reevaluate_interval_s": REEVALUATE_INTERVAL_SECONDS,
        "database_url": DATABASE_URL,
        "component": "api"
    })

    try:
        yield
    finally:
        # Graceful shutdown
        await application.state.scheduler.stop()
        logger.info("Field Jobs API shutting down", extra={
            "details": "Stopped re-evaluation scheduler",
            "component": "api"
        })

app = FastAPI(title="Field Jobs API", version=API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TracingMiddleware)

app.include_router(health_router, prefix=API_PREFIX)
app.include_router(jobs_router, prefix=API_PREFIX)

# Server startup configuration
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Field Jobs API on port {APP_PORT}")

    uvicorn.run(
        "fieldjobs.main:app",
        host="0.0.0.0",
        port=APP_PORT,
        reload=False,
        access_log=True
    )
