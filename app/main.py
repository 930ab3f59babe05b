"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
import numpy as np
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.config import settings
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.api.v1.models.responses import DataStatusResponse
from app.api.v1.routers import monitoring_points
from app.infrastructure.store_client import StoreClient
from app.services.application.monitoring_data_store import MonitoringDataStore
from app.services.domain.mock_data_generator import MockDataGenerator

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates the store client and data store, seeds sample data, and
    closes the client on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Backing store: {settings.store_base_url or 'not configured (mock mode)'}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    client = StoreClient()
    app.state.data_store = MonitoringDataStore(
        store_client=client,
        mock_data=MockDataGenerator(rng=np.random.default_rng(settings.mock_data_seed)),
    )
    if settings.bootstrap_sample_data:
        await app.state.data_store.initialize_sample_data()
    logger.info(f"Using mock data: {app.state.data_store.is_using_mock_data()}")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Soil Health Monitoring API

    This API serves monitoring points and their soil metrics for the
    soil health dashboard.

    ## Features

    - **Monitoring Points**: List and create named field locations
    - **Soil Metrics**: Record readings and fetch history or the latest reading
    - **Status Bands**: Moisture, vegetation and nutrient readings classified
      for display
    - **Automatic Fallback**: When the backing store is unreachable or empty,
      demo data of the same shape is served instead of an error
    - **Rate Limiting**: Protects the API from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(monitoring_points.router, prefix="/api/v1")


def _using_mock_data(request: Request) -> bool:
    data_store = getattr(request.app.state, "data_store", None)
    return data_store is None or data_store.is_using_mock_data()


@app.get("/", tags=["health"])
async def root(request: Request):
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "using_mock_data": _using_mock_data(request),
    }


@app.get("/health", tags=["health"], response_model=DataStatusResponse)
async def health_check(request: Request) -> DataStatusResponse:
    """
    Health check endpoint.

    Returns:
        Health status and whether mock data is being served
    """
    return DataStatusResponse(
        status="healthy",
        service=settings.app_name,
        using_mock_data=_using_mock_data(request),
    )
