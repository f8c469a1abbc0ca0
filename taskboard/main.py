"""
FastAPI Main Application
Taskboard Access Service
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
import structlog
from contextlib import asynccontextmanager

from taskboard.core.config import settings
from taskboard.core.database import init_database, close_database
from taskboard.core.logging import setup_logging
from taskboard.api.v1.router import api_router
from taskboard.api.v1.endpoints.ws import router as ws_router
from taskboard.middleware.logging import LoggingMiddleware
from taskboard.services.reminder_scheduler import reminder_scheduler

# Setup structured logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Taskboard Access Service", version="1.0.0", environment=settings.ENVIRONMENT)

    await init_database()

    if settings.REMINDER_SCHEDULER_ENABLED:
        await reminder_scheduler.start()
    else:
        logger.info("In-process reminder scheduler disabled")

    try:
        yield
    finally:
        logger.info("Shutting down Taskboard Access Service")
        await reminder_scheduler.stop()
        await close_database()


# Create FastAPI application
app = FastAPI(
    title="Taskboard Access API",
    description="Board role resolution and due-date reminders",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

cors_origins = list(settings.CORS_ORIGINS)
if settings.ENVIRONMENT == "development":
    for origin in ("http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:5173"):
        if origin not in cors_origins:
            cors_origins.append(origin)

logger.info("Configuring CORS", environment=settings.ENVIRONMENT, origins=cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
    max_age=600,
)

app.add_middleware(LoggingMiddleware)

if settings.ENVIRONMENT == "production":
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )

app.include_router(api_router, prefix="/api/v1")
app.include_router(ws_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Taskboard Access Service",
        "version": "1.0.0",
        "docs": "/docs" if settings.ENVIRONMENT == "development" else "disabled",
        "health": "/api/v1/health/"
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus scrape endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
