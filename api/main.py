"""
FastAPI main application for the Book Inventory API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from motor.motor_asyncio import AsyncIOMotorClient

from api.config import APIConfig, config as api_config
from api.gateway import BookCollectionGateway
from api.models import HealthResponse
from api.responses import INTERNAL_ERROR, message_response
from api.routes import router as books_router

# Setup logging
logger = structlog.get_logger(__name__)


def build_lifespan(settings: APIConfig):
    """Lifespan that connects to MongoDB unless a gateway was injected."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Book Inventory API")

        client = None
        if getattr(app.state, "gateway", None) is None:
            try:
                client = AsyncIOMotorClient(
                    settings.mongodb_uri,
                    serverSelectionTimeoutMS=settings.mongodb_timeout_ms
                )
                database = client[settings.mongodb_database]

                # Test connection
                await database.command("ping")
                logger.info(
                    "Connected to MongoDB successfully",
                    database=settings.mongodb_database,
                    collection=settings.mongodb_collection
                )

                app.state.gateway = BookCollectionGateway(database[settings.mongodb_collection])

            except Exception as e:
                logger.error("Failed to connect to MongoDB", error=str(e))
                if client:
                    client.close()
                raise

        yield

        # Shutdown
        logger.info("Shutting down Book Inventory API")
        if client:
            client.close()

    return lifespan


def create_app(
    gateway: Optional[BookCollectionGateway] = None,
    settings: APIConfig = api_config
) -> FastAPI:
    """
    Build the application.

    Args:
        gateway: Pre-built gateway; when omitted one is created at startup
        settings: Configuration to read connection and CORS settings from

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.api_title,
        description="CRUD service for the books collection of the Book Inventory database.",
        version=settings.api_version,
        lifespan=build_lifespan(settings)
    )
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle exceptions that escaped a route."""
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path
        )
        return message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)

    app.include_router(books_router)

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    async def root():
        return "Server is running..."

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        store_ok = app.state.gateway is not None and await app.state.gateway.ping()
        db_status = "healthy" if store_ok else "unhealthy"

        return HealthResponse(
            status="healthy" if store_ok else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=settings.api_version,
            database_status=db_status
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level=api_config.log_level.lower()
    )
