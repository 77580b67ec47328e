"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from permissions.presentation import router as permissions_router


@asynccontextmanager
async def bookmark_authz_lifespan(app: FastAPI):
    """Application lifespan context.

    Engines are created lazily on first use and disposed on shutdown.
    """
    yield
    await close_database_connections()


settings = get_settings()
configure_logging(settings.log_level, settings.log_format)

app = FastAPI(
    title=settings.app_name,
    description="Tenant-scoped bookmark permissions and authorization decisions",
    version=__version__,
    debug=settings.debug,
    lifespan=bookmark_authz_lifespan,
)

app.include_router(permissions_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
