"""FastAPI application for the Truth Marketplace service."""

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..domain.errors import AgentUnavailableError, NotFoundError, StorageError, ValidationError
from ..domain.models.settlement import SettlementStatus
from ..infrastructure.dependencies import get_service_container
from .endpoints import badges, claims, health, marketplace, stats, users

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application.

    The container is resolved through the dependency overrides so a test
    container replaces the environment-built one for startup too.
    """
    container_factory = app.dependency_overrides.get(get_service_container, get_service_container)
    container = container_factory()

    # Startup: wire adapters and services
    await container.startup()
    logger.info("🚀 Truth Marketplace API started")

    yield  # Application runs here

    # Shutdown: flush audit messages and close adapters
    await container.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Truth Marketplace API",
    description="Verified-claim marketplace with ledger-settled revenue and NFT badges",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(marketplace.router)
app.include_router(claims.router)
app.include_router(users.router)
app.include_router(badges.router)
app.include_router(stats.router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "status": SettlementStatus.REJECTED.value,
            "error": exc.reason,
            "field": exc.field,
            "code": exc.code,
        },
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


@app.exception_handler(AgentUnavailableError)
async def agent_unavailable_handler(request: Request, exc: AgentUnavailableError) -> JSONResponse:
    logger.error(f"🚫 {exc.message}")
    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "status": SettlementStatus.REJECTED.value,
            "error": "Truth Agent not available",
            "details": exc.reason,
            "code": exc.code,
        },
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(f"❌ Storage failure on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "status": SettlementStatus.FAILED.value,
            "error": "Failed to record the operation",
            "details": exc.message,
            "code": exc.code,
        },
    )
