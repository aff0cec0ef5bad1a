"""Public analytics endpoints: traffic overview and page-view tracking."""

from fastapi import APIRouter, Depends, Query, Request

from tutsin.core.rate_limit import PAGE_VIEW_LIMIT, limiter
from tutsin.schemas.analytics import AnalyticsOverview, PageViewCreate, PageViewRead
from tutsin.services import analytics_service, session_service
from tutsin.services.analytics_service import DEFAULT_WINDOW_DAYS, MAX_WINDOW_DAYS
from tutsin.storage import get_storage
from tutsin.storage.base import Storage

router = APIRouter()


@router.get("/overview", response_model=AnalyticsOverview)
def get_overview(
    days: int = Query(DEFAULT_WINDOW_DAYS, ge=1, le=MAX_WINDOW_DAYS),
    storage: Storage = Depends(get_storage),
):
    """Traffic summary for the trailing ``days`` (default 30)."""
    return analytics_service.build_overview(storage, days)


@router.post("/pageviews", response_model=PageViewRead, status_code=201)
@limiter.limit(PAGE_VIEW_LIMIT)
def track_page_view(
    request: Request,
    data: PageViewCreate,
    storage: Storage = Depends(get_storage),
):
    return analytics_service.record_page_view(
        storage,
        path=data.path,
        referrer=data.referrer,
        ip=session_service.get_client_ip(request),
        user_agent=session_service.get_user_agent(request),
    )
