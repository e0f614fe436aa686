"""
FastAPI main application for the Reno Visualizer API
"""
import logging
import os
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

# Add api directory to path for imports (works both locally and when deployed)
api_dir = os.path.dirname(os.path.abspath(__file__))
if api_dir not in sys.path:
    sys.path.insert(0, api_dir)

from core.config import settings
from core.logging import setup_logging
from middleware import RequestLoggingMiddleware
from routers import tiles
from services.wastage_report_service import WastageReportService

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {settings.app_name}...")

    if settings.openai_api_key:
        key = settings.openai_api_key
        key_preview = f"{key[:7]}...{key[-4:]}" if len(key) > 11 else "***"
        logger.info(f"✅ OPENAI_API_KEY is set: {key_preview}")
    else:
        logger.warning("OPENAI_API_KEY is NOT set - wastage reports will use the calculator only")

    # One service (and OpenAI client) per application lifetime
    app.state.wastage_report_service = WastageReportService()
    logger.info("Application started")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await app.state.wastage_report_service.close()
    logger.info("Application stopped")


app = FastAPI(
    title=settings.app_name,
    description="Tile layout and wastage estimation for the room visualizer",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "ai_reports": bool(settings.openai_api_key),
    }


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": "Tile layout and wastage estimation for the room visualizer",
        "docs": "/docs" if settings.environment == "development" else None,
        "endpoints": {
            "layout": "/api/tiles/layout",
            "layout_batch": "/api/tiles/layout/batch",
            "wastage": "/api/tiles/wastage",
            "wastage_policies": "/api/tiles/wastage/policies",
            "calculate_wastage": "/api/calculate-wastage",
            "wastage_usage_stats": "/api/tiles/wastage/usage-stats",
        },
    }


app.include_router(tiles.router, prefix="/api", tags=["tiles"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=settings.environment == "development",
        log_config=None,  # Use our custom logging
        access_log=False,  # We handle this in middleware
    )
