"""Admin dashboard: stats, analytics overview and system health."""

import logging

from fastapi import APIRouter, Depends, Query

from tutsin.core.config import settings
from tutsin.core.deps import get_current_admin, require_permission
from tutsin.core.permissions import Permission
from tutsin.db.enums import ProjectStatus
from tutsin.schemas.admin import DashboardStats
from tutsin.schemas.analytics import AnalyticsOverview
from tutsin.services import analytics_service
from tutsin.services.analytics_service import DEFAULT_WINDOW_DAYS, MAX_WINDOW_DAYS
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard/stats", response_model=DashboardStats,
            dependencies=[Depends(get_current_admin)])
def get_dashboard_stats(storage: Storage = Depends(get_storage)):
    posts = storage.list_blog_posts()
    projects = storage.list_projects()
    return DashboardStats(
        total_admins=len(storage.list_admins()),
        total_roles=len(storage.list_admin_roles()),
        total_clients=len(storage.list_clients()),
        total_blog_posts=len(posts),
        published_posts=sum(1 for p in posts if p.published),
        total_projects=len(projects),
        active_projects=sum(1 for p in projects if p.status == ProjectStatus.ACTIVE.value),
        contact_submissions=len(storage.list_contact_submissions()),
    )


@router.get("/analytics/overview", response_model=AnalyticsOverview,
            dependencies=[Depends(require_permission(Permission.VIEW_ANALYTICS))])
def get_analytics_overview(
    days: int = Query(DEFAULT_WINDOW_DAYS, ge=1, le=MAX_WINDOW_DAYS),
    storage: Storage = Depends(get_storage),
):
    return analytics_service.build_overview(storage, days)


@router.get("/system/health", dependencies=[Depends(require_permission(Permission.SYSTEM_SETTINGS))])
def get_system_health(storage: Storage = Depends(get_storage)):
    """Storage reachability plus runtime configuration summary."""
    try:
        storage_ok = storage.ping()
    except Exception:
        logger.exception("Storage health check failed")
        storage_ok = False

    return {
        "status": "healthy" if storage_ok else "degraded",
        "storage": {"backend": storage.name, "ok": storage_ok},
        "env": settings.ENV,
        "version": settings.VERSION,
        "sessions": {
            "clientHours": settings.CLIENT_SESSION_HOURS,
            "adminHours": settings.ADMIN_SESSION_HOURS,
        },
    }
