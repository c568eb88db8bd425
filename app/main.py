"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.v1.router import api_router
from app.config import get_settings
from app.core.logging import get_logger, setup_logging
from app.core.middleware import ObservabilityMiddleware
from app.database import engine

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("app_started", debug=settings.debug)
    yield
    await engine.dispose()
    logger.info("app_stopped")


app = FastAPI(
    title="LinkPulse",
    description="LinkedIn content toolkit: trending post search and carousel generation.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
