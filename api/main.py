"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import endpoints, health, tables
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.logging import setup_logging
from ingestion.loaders import create_storage
from ingestion.scheduler import ETLScheduler
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="API Fetcher Operations",
    description="Operational view of the schema-evolving API ingestion engine",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(tables.router)
app.include_router(endpoints.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting API fetcher operations API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database provider: {settings.DB_PROVIDER}")

    app.state.storage = create_storage()
    await app.state.storage.connect()

    app.state.scheduler = None
    if settings.SCHEDULER_ENABLED:
        app.state.scheduler = ETLScheduler()
        app.state.scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down API fetcher operations API")
    if app.state.scheduler is not None:
        app.state.scheduler.stop()
    await app.state.storage.disconnect()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "API Fetcher Operations",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "tables": "/tables",
            "endpoints": "/endpoints"
        }
    }
