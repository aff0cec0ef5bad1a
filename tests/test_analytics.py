"""Traffic overview and page-view tracking."""

from datetime import date, timedelta

import pytest

from tests.conftest import bearer
from tutsin.db.types import utcnow
from tutsin.services.analytics_service import build_overview, purge_old_page_views, record_page_view


def _metrics(storage, day: date, views: int, bounce: int, duration: int, pages=None, referrers=None):
    storage.create_website_metrics(
        {
            "date": day.isoformat(),
            "total_views": views,
            "unique_visitors": views // 2,
            "bounce_rate": bounce,
            "avg_session_duration": duration,
            "top_pages": pages or [],
            "top_referrers": referrers or [],
        }
    )


def test_overview_sums_and_rounds_half_up(storage):
    today = date(2026, 3, 10)
    _metrics(storage, today, 100, 40, 120, pages=[{"page": "/", "views": 60}])
    _metrics(storage, today - timedelta(days=1), 50, 41, 121, pages=[{"page": "/blog", "views": 70}])
    # Outside a 7-day window
    _metrics(storage, today - timedelta(days=10), 999, 0, 0)

    overview = build_overview(storage, days=7, today=today)

    assert overview["summary"] == {
        "total_views": 150,
        "total_unique_visitors": 75,
        "avg_bounce_rate": 41,  # 40.5 rounds up
        "avg_session_duration": 121,  # 120.5 rounds up
    }
    assert overview["top_pages"] == [{"page": "/blog", "views": 70}, {"page": "/", "views": 60}]
    assert overview["period"] == {"start_date": "2026-03-04", "end_date": "2026-03-10"}
    assert [d["date"] for d in overview["daily_metrics"]] == ["2026-03-09", "2026-03-10"]


def test_overview_counts_bare_entries_once_per_day(storage):
    today = date(2026, 3, 10)
    _metrics(storage, today, 1, 0, 0, referrers=["google.com"])
    _metrics(storage, today - timedelta(days=1), 1, 0, 0, referrers=["google.com", "direct"])

    overview = build_overview(storage, days=7, today=today)

    assert overview["top_referrers"] == [
        {"referrer": "google.com", "visits": 2},
        {"referrer": "direct", "visits": 1},
    ]


def test_overview_empty_window_is_zero(storage):
    overview = build_overview(storage, days=30, today=date(2026, 3, 10))
    assert overview["summary"]["avg_bounce_rate"] == 0
    assert overview["top_pages"] == []
    assert overview["daily_metrics"] == []


@pytest.mark.asyncio
async def test_overview_endpoint_uses_camel_case(client, storage):
    _metrics(storage, utcnow().date(), 10, 30, 60)

    response = await client.get("/api/analytics/overview", params={"days": 7})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["totalViews"] == 10
    assert "topPages" in body and "dailyMetrics" in body
    assert body["period"]["endDate"] == utcnow().date().isoformat()


@pytest.mark.asyncio
async def test_overview_days_out_of_range(client):
    response = await client.get("/api/analytics/overview", params={"days": 0})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "days"


@pytest.mark.asyncio
async def test_page_views_roll_up_into_todays_metrics(client, storage):
    for path in ("/", "/", "/blog"):
        response = await client.post(
            "/api/analytics/pageviews", json={"path": path, "referrer": "google.com"}
        )
        assert response.status_code == 201

    today = storage.get_website_metrics(utcnow().date().isoformat())
    assert today.total_views == 3
    assert today.unique_visitors == 1
    assert today.top_pages[0] == {"page": "/", "views": 2}
    assert today.top_referrers == [{"referrer": "google.com", "visits": 3}]


@pytest.mark.asyncio
async def test_admin_overview_requires_view_analytics(client, super_admin_token, test_client_auth):
    ok = await client.get("/api/admin/analytics/overview", headers=bearer(super_admin_token))
    assert ok.status_code == 200

    as_client = await client.get("/api/admin/analytics/overview", headers=test_client_auth.headers)
    assert as_client.status_code == 401


def test_page_view_from_new_ip_counts_as_visitor(storage):
    record_page_view(storage, "/", ip="203.0.113.5")
    record_page_view(storage, "/about", ip="203.0.113.5")
    record_page_view(storage, "/", ip="198.51.100.9")
    record_page_view(storage, "/")

    today = storage.get_website_metrics(utcnow().date().isoformat())
    assert today.total_views == 4
    assert today.unique_visitors == 2
    assert {"referrer": "direct", "visits": 4} in today.top_referrers


def test_purge_keeps_daily_metrics(storage):
    old = utcnow() - timedelta(days=120)
    storage.create_page_view({"path": "/", "ip": "203.0.113.5", "timestamp": old})
    record_page_view(storage, "/", ip="203.0.113.6")

    assert purge_old_page_views(storage, retention_days=90) == 1
    assert storage.get_website_metrics(utcnow().date().isoformat()).total_views == 1
