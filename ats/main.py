"""ATS workflow engine - HTTP entry point."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ats.core.config import settings
from ats.core.storage import Database
from ats.routers import workflow_router
from ats.services.analytics_service import AnalyticsRecorder
from ats.services.notifications import create_notification_dispatcher
from ats.services.workflow_service import WorkflowService

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    database = Database(
        str(settings.database_url),
        echo=settings.database_echo,
        lock_timeout=settings.database_lock_timeout_seconds,
    )
    await database.init_models()

    sinks = [create_notification_dispatcher(settings, database)]
    if settings.analytics_enabled:
        sinks.append(AnalyticsRecorder(database))
    app.state.workflow_service = WorkflowService(database, sinks)
    logger.info(
        f"Application initialized (notifications: {settings.notification_backend})"
    )

    yield

    logger.info("Shutting down...")
    await database.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="ATS Workflow",
    description="Application, interview and offer workflow engine",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workflow_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ats-workflow"}
