"""
Main FastAPI application for AutoLead SA.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import leads, dealers, insights, regions
from .services import get_services, initialize_services
from .middleware.metrics import MetricsMiddleware, metrics_endpoint
from config.settings import get_settings
from database.session import init_db, close_db, is_initialized

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(f"{settings.app_name} starting up...")

    if settings.database_url:
        await init_db(settings.database_url, echo=settings.debug)
    else:
        logger.warning("DATABASE_URL not set, lead and dealer endpoints disabled")

    initialize_services()
    logger.info(f"{settings.app_name} ready")
    yield
    logger.info(f"{settings.app_name} shutting down...")

    await close_db()
    get_services().reset()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="AutoLead SA Lead Engine API",
        description="Dealer lead distribution, scoring and market search for South African dealerships.",
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus metrics middleware
    app.add_middleware(MetricsMiddleware)

    app.include_router(leads.router, prefix="/api/v1", tags=["Leads"])
    app.include_router(dealers.router, prefix="/api/v1", tags=["Dealers"])
    app.include_router(insights.router, prefix="/api/v1", tags=["Market Insights"])
    app.include_router(regions.router, prefix="/api/v1", tags=["Reference"])

    # --- Prometheus metrics endpoint ---
    app.get("/metrics", tags=["Monitoring"])(metrics_endpoint)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "service": settings.app_name,
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
        }

    # Health check
    @app.get("/health")
    async def health():
        services = get_services()
        database = is_initialized()
        return {
            "status": "healthy" if services.is_ready and database else "degraded",
            "services": {**services.health(), "database": database},
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
