"""Pydantic schemas for analytics reporting and page-view tracking."""

from datetime import datetime

from pydantic import Field

from tutsin.schemas.common import CamelModel


class PageViewCreate(CamelModel):
    path: str = Field(..., min_length=1, max_length=500)
    referrer: str | None = Field(None, max_length=500)


class PageViewRead(CamelModel):
    id: str
    path: str
    referrer: str | None = None
    timestamp: datetime


class AnalyticsSummary(CamelModel):
    total_views: int
    total_unique_visitors: int
    avg_bounce_rate: int
    avg_session_duration: int


class TopPage(CamelModel):
    page: str
    views: int


class TopReferrer(CamelModel):
    referrer: str
    visits: int


class DailyMetric(CamelModel):
    date: str
    total_views: int
    unique_visitors: int
    bounce_rate: int
    avg_session_duration: int


class AnalyticsPeriod(CamelModel):
    start_date: str
    end_date: str


class AnalyticsOverview(CamelModel):
    summary: AnalyticsSummary
    top_pages: list[TopPage]
    top_referrers: list[TopReferrer]
    daily_metrics: list[DailyMetric]
    period: AnalyticsPeriod
