"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auto_shorts.api.dependencies import get_registry
from auto_shorts.api.routes import router
from auto_shorts.config import settings

logger = structlog.get_logger()

_DEFAULT_ORIGINS = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
}


def _get_allowed_origins() -> set[str]:
    origins = set(_DEFAULT_ORIGINS)
    if settings.allowed_origins:
        origins.update(o.strip() for o in settings.allowed_origins.split(",") if o.strip())
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and cancel unfinished runs on shutdown."""
    logger.info("app.startup", res_dir=settings.res_dir, temp_dir=settings.temp_dir)
    yield
    registry = get_registry()
    pending = [task for task in registry.values() if not task.done]
    for task in pending:
        task.cancel()
    logger.info("app.shutdown", cancelled_runs=len(pending))


app = FastAPI(
    title="Auto Shorts",
    description="Turns structured scripts into rendered short-form videos",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(_get_allowed_origins()),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
