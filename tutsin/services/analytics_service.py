"""Analytics service - overview reports from daily metrics, page-view tracking."""

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone

from tutsin.db.models import PageView, WebsiteMetrics
from tutsin.db.types import utcnow
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
MAX_WINDOW_DAYS = 365
TOP_N = 5


def _period(days: int, today: date | None = None) -> tuple[str, str]:
    end = today or utcnow().date()
    start = end - timedelta(days=days - 1)
    return start.isoformat(), end.isoformat()


def _mean(values) -> int:
    """Integer mean rounded half-up."""
    values = list(values)
    return (2 * sum(values) + len(values)) // (2 * len(values))


def _rank(metrics: list[WebsiteMetrics], attr: str, key: str, count_key: str) -> list[dict]:
    """
    Rank entries across days: by summed counts where days report them,
    falling back to how many days listed the entry.
    """
    totals: Counter = Counter()
    for day in metrics:
        for item in getattr(day, attr) or []:
            if isinstance(item, str):
                totals[item] += 1
                continue
            name = item.get(key)
            if name:
                totals[name] += int(item.get(count_key) or 1)
    return [{key: name, count_key: total} for name, total in totals.most_common(TOP_N)]


def build_overview(storage: Storage, days: int = DEFAULT_WINDOW_DAYS, today: date | None = None) -> dict:
    """
    Summarize the trailing ``days`` of daily metrics.

    Averages are rounded to whole numbers; an empty window yields zeros.
    """
    start_date, end_date = _period(days, today)
    metrics = storage.list_website_metrics(start_date, end_date)

    total_views = sum(m.total_views for m in metrics)
    total_unique = sum(m.unique_visitors for m in metrics)
    if metrics:
        avg_bounce = _mean(m.bounce_rate for m in metrics)
        avg_duration = _mean(m.avg_session_duration for m in metrics)
    else:
        avg_bounce = avg_duration = 0

    return {
        "summary": {
            "total_views": total_views,
            "total_unique_visitors": total_unique,
            "avg_bounce_rate": avg_bounce,
            "avg_session_duration": avg_duration,
        },
        "top_pages": _rank(metrics, "top_pages", "page", "views"),
        "top_referrers": _rank(metrics, "top_referrers", "referrer", "visits"),
        "daily_metrics": [
            {
                "date": m.date,
                "total_views": m.total_views,
                "unique_visitors": m.unique_visitors,
                "bounce_rate": m.bounce_rate,
                "avg_session_duration": m.avg_session_duration,
            }
            for m in metrics
        ],
        "period": {"start_date": start_date, "end_date": end_date},
    }


def record_page_view(
    storage: Storage,
    path: str,
    referrer: str | None = None,
    ip: str | None = None,
    user_agent: str | None = None,
) -> PageView:
    """Store a page view and count it into today's metrics row."""
    now = utcnow()
    day_start = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    new_visitor = bool(ip) and not storage.has_page_view_from(ip, day_start)

    view = storage.create_page_view(
        {"path": path, "referrer": referrer, "ip": ip, "user_agent": user_agent, "timestamp": now}
    )
    storage.record_daily_view(now.date().isoformat(), path, referrer or "direct", new_visitor)
    return view


def purge_old_page_views(storage: Storage, retention_days: int) -> int:
    """Drop raw page views older than ``retention_days``; daily metrics are kept."""
    removed = storage.purge_page_views(utcnow() - timedelta(days=retention_days))
    if removed:
        logger.info("Purged %d page views older than %d days", removed, retention_days)
    return removed
