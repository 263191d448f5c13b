"""
Main FastAPI application for the hockey import reconciliation API.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rinksync.api.routes import events, imports
from rinksync.core.config import settings
from rinksync.core.database import init_db
from rinksync.core.logging import configure_logging, get_logger
from rinksync.core.middleware import CorrelationIdMiddleware

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    init_db()
    logger.info("Application started")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Reconciles pasted hockey score tables, schedules and standings into one game store",
    lifespan=lifespan,
)

# Correlation IDs group every log line of one import request
app.add_middleware(CorrelationIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers carry their own /api/... prefixes
app.include_router(imports.router)
app.include_router(events.router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "imports": {
                "games": "/api/imports/games",
                "schedule": "/api/imports/schedule",
                "standings": "/api/imports/standings",
            },
            "events": {
                "standings": "/api/events/{event_id}/standings",
                "cross_check": "/api/events/{event_id}/cross-check",
                "playdown_schedule": "/api/events/{event_id}/playdown-schedule",
                "team_record": "/api/events/{event_id}/teams/{team_id}/record",
            },
            "docs": "/docs",
            "health": "/health",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "rinksync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
