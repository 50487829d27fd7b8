"""
FastAPI application entry point for the UI Generation Layer.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from generation_layer.api.dependencies import close_resources
from generation_layer.api.error_handlers import EXCEPTION_HANDLERS
from generation_layer.api.middleware import RequestTracingMiddleware
from generation_layer.api.routes_generation import router as generation_router
from generation_layer.api.routes_projects import router as projects_router
from generation_layer.config import settings
from generation_layer.llm.prompt_builder import DEFAULT_TEMPLATES_DIR
from generation_layer.llm.registry import is_provider_configured
from generation_layer.logging_config import configure_logging

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup checks, then close provider HTTP pools on shutdown."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        primary_provider=settings.PRIMARY_PROVIDER,
        secondary_provider=settings.SECONDARY_PROVIDER,
    )

    if not is_provider_configured(settings.PRIMARY_PROVIDER, settings):
        logger.error(
            "Primary provider has no API keys or models; generation requests will fail",
            provider=settings.PRIMARY_PROVIDER,
        )

    if DEFAULT_TEMPLATES_DIR.exists():
        logger.info("Prompt templates directory found", path=str(DEFAULT_TEMPLATES_DIR))
    else:
        logger.error("Prompt templates directory not found", path=str(DEFAULT_TEMPLATES_DIR))

    projects_dir = Path(settings.PROJECTS_DIR)
    projects_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Project store ready", path=str(projects_dir.resolve()))

    logger.info("Application startup complete")
    yield

    logger.info("Application shutdown")
    await close_resources()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="UI Generation Layer",
    description="Turns UI mockups, prompts and Figma frames into web, Android and iOS code",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

# Include routers
app.include_router(generation_router, tags=["generation"])
app.include_router(projects_router, prefix="/projects", tags=["projects"])

# Prometheus metrics instrumentation
if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "projects": "/projects",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "generation_layer.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
