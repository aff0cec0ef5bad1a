"""FastAPI application entry point."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tutsin.core.config import settings
from tutsin.core.errors import register_exception_handlers
from tutsin.core.rate_limit import limiter
from tutsin.core.structured_logging import configure_logging
from tutsin.storage import get_storage
from tutsin.storage.base import Storage
from tutsin.worker import session_sweep_loop

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("Sentry initialized for error tracking")


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage_provider = app.dependency_overrides.get(get_storage, get_storage)
    sweeper = asyncio.create_task(
        session_sweep_loop(storage_provider(), settings.SESSION_SWEEP_INTERVAL_SECONDS)
    )
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Tutsin Digital API",
    description="Agency website, client portal and admin back office API",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# ============================================================================
# Routers
# ============================================================================

from tutsin.routers import analytics, auth, blog, contact, notifications, projects  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(blog.router, prefix="/api/blog", tags=["blog"])
app.include_router(contact.router, prefix="/api/contact", tags=["contact"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])

# Mixed paths: /projects/{id}/..., /milestones/{id}, /tasks/{id}, /comments/{id}
app.include_router(projects.router, prefix="/api", tags=["projects"])

# Client notifications
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])

# Admin back office (routers carry their own sub-prefixes)
from tutsin.routers import (  # noqa: E402
    admin_accounts,
    admin_auth,
    admin_clients,
    admin_content,
    admin_dashboard,
    admin_files,
    admin_notifications,
    admin_roles,
)

for admin_router in (
    admin_auth.router,
    admin_accounts.router,
    admin_roles.router,
    admin_clients.router,
    admin_content.router,
    admin_dashboard.router,
    admin_files.router,
    admin_notifications.router,
):
    app.include_router(admin_router, prefix="/api/admin", tags=["admin"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health(storage: Storage = Depends(get_storage)):
    """
    Health check endpoint.

    Verifies storage connectivity and returns environment info.
    """
    storage.ping()
    return {
        "status": "ok",
        "env": settings.ENV,
        "version": settings.VERSION,
        "storage": storage.name,
    }
