"""
FastAPI Application

Main FastAPI application for QueryIQ with:
- Lifespan management for the project store, cipher and LLM provider
- CORS middleware for frontend integration
- Global exception handlers for connector, validation and project errors
- Health, project, chat and export endpoints

Usage:
    uvicorn queryiq.api.main:app --reload --port 8000
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from queryiq import __version__
from queryiq.api.routes import chat, export, health, projects
from queryiq.chat import ChatOrchestrator
from queryiq.config import get_settings
from queryiq.connectors.base import ConnectionError as ConnectorConnectionError
from queryiq.connectors.base import QueryExecutionError
from queryiq.export import ExportService
from queryiq.llm import create_llm_provider
from queryiq.models.database import UnsupportedDatabaseError
from queryiq.projects import ProjectCreationError, ProjectNotFoundError, ProjectService, ProjectStore
from queryiq.query.validator import ValidationError as QueryValidationError
from queryiq.security.encryption import CredentialCipher, DecryptionError, EncryptionConfigError

logger = logging.getLogger(__name__)

# Global state for long-lived components
app_state = {
    "cipher": None,
    "project_store": None,
    "project_service": None,
    "orchestrator": None,
    "export_service": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Initializes:
    - Credential cipher (QUERYIQ_ENCRYPTION_KEY)
    - Project store (SYSTEM_DATABASE_URL)
    - Project service and export service
    - Chat orchestrator (LLM_OPENAI_API_KEY)
    """
    config = get_settings()
    logger.info("Starting QueryIQ API server...")

    try:
        app_state["export_service"] = ExportService(config.query)

        try:
            app_state["cipher"] = CredentialCipher(config.encryption_key)
        except EncryptionConfigError as e:
            logger.warning(f"Credential cipher unavailable: {e}")
            app_state["cipher"] = None

        logger.info("Initializing project store...")
        if config.system_database.url:
            try:
                store = ProjectStore(str(config.system_database.url))
                await store.initialize()
                app_state["project_store"] = store
            except Exception as e:
                logger.warning(f"Project store unavailable: {e}")
                app_state["project_store"] = None
        else:
            logger.warning("SYSTEM_DATABASE_URL not set; project store disabled.")

        if app_state["project_store"] is not None and app_state["cipher"] is not None:
            app_state["project_service"] = ProjectService(
                app_state["project_store"], app_state["cipher"], config.query
            )

        logger.info("Initializing chat orchestrator...")
        if app_state["cipher"] is not None:
            try:
                app_state["orchestrator"] = ChatOrchestrator(
                    llm=create_llm_provider(config.llm),
                    cipher=app_state["cipher"],
                    pagination_config=config.pagination.to_config(),
                    query_settings=config.query,
                    llm_settings=config.llm,
                )
            except ValueError as e:
                logger.warning(f"Chat orchestrator unavailable: {e}")
                app_state["orchestrator"] = None

        logger.info("QueryIQ API server started successfully")

        yield

    finally:
        logger.info("Shutting down QueryIQ API server...")

        if app_state["project_store"]:
            try:
                await app_state["project_store"].close()
                logger.info("Project store closed")
            except Exception as e:
                logger.error(f"Error closing project store: {e}")

        for key in app_state:
            app_state[key] = None

        logger.info("QueryIQ API server shut down complete")


app = FastAPI(
    title="QueryIQ API",
    description="Natural language chat over PostgreSQL, MySQL and MongoDB databases",
    version=__version__,
    lifespan=lifespan,
)

cors_origins_env = os.getenv("CORS_ORIGINS", "")
cors_origins = (
    [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    if cors_origins_env
    else ["http://localhost:3000"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(ConnectorConnectionError)
async def connection_error_handler(request: Request, exc: ConnectorConnectionError) -> JSONResponse:
    """Handle database connection errors."""
    logger.error(f"Database connection error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "connection_error",
            "message": "Database connection failed. Please try again later.",
        },
    )


@app.exception_handler(QueryExecutionError)
async def query_error_handler(request: Request, exc: QueryExecutionError) -> JSONResponse:
    """Handle query execution errors, including statement timeouts."""
    logger.error(f"Query execution error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "query_error", "message": str(exc)},
    )


@app.exception_handler(QueryValidationError)
async def validation_error_handler(request: Request, exc: QueryValidationError) -> JSONResponse:
    logger.warning(f"Query rejected: {exc.reason}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation_error", "message": exc.reason},
    )


@app.exception_handler(UnsupportedDatabaseError)
async def unsupported_database_handler(request: Request, exc: UnsupportedDatabaseError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "unsupported_database", "message": str(exc)},
    )


@app.exception_handler(ProjectCreationError)
async def project_creation_handler(request: Request, exc: ProjectCreationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "project_error", "message": exc.message},
    )


@app.exception_handler(ProjectNotFoundError)
async def project_not_found_handler(request: Request, exc: ProjectNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "message": str(exc)},
    )


@app.exception_handler(DecryptionError)
async def decryption_error_handler(request: Request, exc: DecryptionError) -> JSONResponse:
    logger.error("Stored connection string could not be decrypted")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "decryption_error",
            "message": "Stored credentials could not be read.",
        },
    )


# Include routers; export paths are registered before /chat/{project_id}
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(projects.router, prefix="/api/v1", tags=["projects"])
app.include_router(export.router, prefix="/api/v1", tags=["export"])
app.include_router(chat.router, prefix="/api/v1", tags=["chat"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "QueryIQ API",
        "version": __version__,
        "docs": "/docs",
    }
