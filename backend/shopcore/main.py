"""
FastAPI application entry point for Shopcore.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shopcore.api.v1.router import api_router
from shopcore.config import settings
from shopcore.database import get_db_context, init_db
from shopcore.schemas.common import ErrorResponse
from shopcore.services.resolution_cache import close_resolution_cache
from shopcore.services.tenant_provisioner import TenantProvisioner

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    configure_logging()
    await init_db()
    if settings.SUPERADMIN_EMAIL and settings.SUPERADMIN_PASSWORD:
        async with get_db_context() as db:
            await TenantProvisioner(db).ensure_super_admin(
                settings.SUPERADMIN_EMAIL, settings.SUPERADMIN_PASSWORD
            )
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
    yield
    # Shutdown
    await close_resolution_cache()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
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


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(detail="Internal server error", code="internal_error").model_dump(),
    )


# Include API router
app.include_router(
    api_router,
    prefix=settings.API_V1_STR,
    responses={500: {"model": ErrorResponse}},
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.VERSION}


@app.get(f"{settings.API_V1_STR}/health")
async def api_health_check():
    """API health check endpoint."""
    return {"status": "healthy", "version": settings.VERSION}
