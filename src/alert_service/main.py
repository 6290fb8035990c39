"""Main FastAPI application for missing-alert-service."""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from alert_service import __version__
from alert_service.api.errors import configure_exception_handlers
from alert_service.api.routes.cases import router as cases_router
from alert_service.api.routes.users import router as users_router
from alert_service.config import settings
from alert_service.infrastructure.database import db_client
from alert_service.models import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Missing Alert Case Service",
    description="Case lifecycle service for missing-person reports",
    version=__version__,
)

# Credentials are verified upstream; services trust X-User-* headers from API Gateway
logger.info("Service trusts X-User-* headers from API Gateway (no credential validation)")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

configure_exception_handlers(app)

# Include routers
app.include_router(cases_router)
app.include_router(users_router)


@app.on_event("startup")
async def startup():
    """Initialize storage on startup."""
    logger.info(f"Starting {settings.service_name} on port {settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Case storage: {settings.case_storage_type}")

    if not settings.uses_sql_storage:
        return

    try:
        # Verify connection with retry logic (database may still be starting)
        await db_client.verify_connection()

        # Alembic migrations are the primary path; create_tables() covers local runs
        await db_client.create_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


@app.on_event("shutdown")
async def shutdown():
    """Clean up resources on shutdown."""
    logger.info("Shutting down service")
    await db_client.close()


@app.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Returns the health status of the Missing Alert Case Service.

**Response Example**:
```json
{
  "status": "healthy",
  "service": "missing-alert-service",
  "version": "1.0.0",
  "storage": "inmemory"
}
```

**Use Cases**:
- Container liveness/readiness probes
- Load balancer health checks

**Storage**: No database query (reports storage type only)
**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Service is healthy and operational"},
        500: {"description": "Service is unhealthy or experiencing issues"}
    }
)
async def health_check():
    """Health check endpoint."""
    storage = settings.case_storage_type
    if settings.uses_sql_storage:
        storage = settings.database_url.split("://")[0]

    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=__version__,
        storage=storage,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "alert_service.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
