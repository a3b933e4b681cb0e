"""Root API router with the versioned prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from civic_sync.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware, setup_cors
from civic_sync.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from civic_sync.api.v1.directory import directory_router
    from civic_sync.api.v1.reports import reports_router
    from civic_sync.api.v1.sync import sync_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(sync_router)
    root_router.include_router(directory_router)
    root_router.include_router(reports_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RateLimitMiddleware, requests_per_minute=settings.rate_limit_per_minute)
