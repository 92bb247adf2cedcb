"""
FastAPI application entry point.
Configures middleware, routers, and the ledger client lifecycle.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from certanchor.core.config import Settings, get_settings
from certanchor.core.logging import configure_logging, get_logger
from certanchor.modules.anchoring.router import router as anchoring_router
from certanchor.modules.health.router import router as health_router
from certanchor.modules.health.service import LedgerHealthMonitor
from certanchor.modules.ledger.base import LedgerClient
from certanchor.modules.ledger.dependencies import build_ledger_client
from certanchor.modules.verification.router import router as verification_router

logger = get_logger(__name__)


def create_application(
    settings: Settings | None = None,
    *,
    ledger_client: LedgerClient | None = None,
) -> FastAPI:
    """
    Application factory function.

    ``settings`` and ``ledger_client`` may be supplied explicitly so several
    isolated instances (per test, per network) can coexist. When omitted they
    come from the environment.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "starting_application",
            environment=settings.environment,
            version=settings.version,
            ledger_backend=settings.ledger_backend,
        )
        yield
        await app.state.ledger_client.close()
        logger.info("application_shutdown_complete")

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.ledger_client = ledger_client or build_ledger_client(settings)

    # ==========================================================================
    # Middleware Configuration
    # ==========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # ==========================================================================
    # Router Registration
    # ==========================================================================

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, object]:
        ledger_health = await LedgerHealthMonitor(app.state.ledger_client).check_health()
        checks = {"ledger": "ok" if ledger_health.connected else "unavailable"}
        overall = "healthy" if all(v == "ok" for v in checks.values()) else "degraded"
        return {"status": overall, "version": settings.version, "checks": checks}

    blockchain_prefix = f"{settings.api_v1_prefix}/blockchain"
    app.include_router(
        anchoring_router,
        prefix=blockchain_prefix,
        tags=["Anchoring"],
    )
    app.include_router(
        verification_router,
        prefix=blockchain_prefix,
        tags=["Verification"],
    )
    app.include_router(
        health_router,
        prefix=blockchain_prefix,
        tags=["Ledger Status"],
    )

    return app


# Application instance
app = create_application()
