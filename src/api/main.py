"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iam.dependencies.providers import close_tenant_backend
from iam.infrastructure.supertokens.bootstrap import init_supertokens
from iam.presentation import register_exception_handlers
from iam.presentation import router as iam_router
from infrastructure.logging import configure_logging
from infrastructure.settings import get_identity_settings, get_settings
from infrastructure.version import __version__


@asynccontextmanager
async def gatehouse_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Identity backend SDK initialization
    - Resource backend channel cleanup on shutdown
    """
    configure_logging(debug=get_settings().debug)
    init_supertokens(get_identity_settings())

    yield

    await close_tenant_backend()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant authorization core",
        version=__version__,
        lifespan=gatehouse_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Tenant-ID", "X-Request-ID"],
    )

    register_exception_handlers(app)
    app.include_router(iam_router)

    @app.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()
