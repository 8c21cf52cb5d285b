"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice import __version__
from backoffice.api.router import api_router
from backoffice.core.config import settings
from backoffice.core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    logger.info(f"Starting {settings.app_name} API")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Backend URL: {settings.api_base_url}")

    yield

    logger.info(f"Shutting down {settings.app_name} API")


app = FastAPI(
    title=f"{settings.app_name} API",
    description="Inventory, sales and accounting back office over a REST backend",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    """Where the docs and the versioned API live."""
    return {
        "message": f"{settings.app_name} API",
        "docs": "/api/docs",
        "api": "/api/v1",
    }
