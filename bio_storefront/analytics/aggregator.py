"""
Analytics Aggregator

Read side of page analytics. Every report groups the raw view and click
facts of the requested window in the database; nothing is cached or stored.
"""

from datetime import datetime
from typing import Dict, List, Optional

import structlog
from pydantic import Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.analytics.rollups import (
    Period,
    calendar_day,
    click_through_rate,
    day_range,
    dense_series,
    parse_period,
    top_n,
    window_start,
)
from bio_storefront.config import get_settings
from bio_storefront.database.models import ComponentClick, DeviceType, PageView, utcnow
from bio_storefront.schemas import CamelModel

logger = structlog.get_logger(__name__)


class ChartPoint(CamelModel):
    date: str
    views: int
    clicks: int


class TopComponent(CamelModel):
    label: str
    type: str
    count: int


class AnalyticsReport(CamelModel):
    total_views: int
    total_clicks: int
    ctr: float
    chart_data: List[ChartPoint]
    device_stats: Dict[str, int]
    top_components: List[TopComponent]
    period: Period


class AnalyticsSummary(CamelModel):
    views7d: int
class AnalyticsSummary(CamelModel):
    # to_camel would capitalize the "d"
    views7d: int = Field(alias="views7d")
    clicks7d: int = Field(alias="clicks7d")


class AnalyticsAggregator:
    """
    Windowed rollups over views and clicks, grouped in the database.

    ``now`` is injectable so windows can be pinned in tests.

    Example:
        report = await AnalyticsAggregator(db).get_analytics(page_id, "30d")
        report.to_json()["chartData"]
    """

    def __init__(self, db: AsyncSession, top_components_limit: Optional[int] = None):
        self.db = db
        self.top_components_limit = top_components_limit or get_settings().storefront.top_components_limit

    async def get_analytics(
        self,
        page_id: int,
        period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        window = parse_period(period, default=Period.WEEK)
        now = now or utcnow()
        start = window_start(window, now)

        view_day = calendar_day(PageView.viewed_at)
        daily_views = await self.db.execute(
            select(view_day.label("day"), func.count(PageView.id).label("views"))
            .where(PageView.page_id == page_id, PageView.viewed_at >= start)
            .group_by(view_day)
        )
        click_day = calendar_day(ComponentClick.clicked_at)
        daily_clicks = await self.db.execute(
            select(click_day.label("day"), func.count(ComponentClick.id).label("clicks"))
            .where(ComponentClick.page_id == page_id, ComponentClick.clicked_at >= start)
            .group_by(click_day)
        )

        buckets: Dict = {}
        total_views = 0
        for row in daily_views.all():
            buckets.setdefault(row.day, {"views": 0, "clicks": 0})["views"] = row.views
            total_views += row.views
        total_clicks = 0
        for row in daily_clicks.all():
            buckets.setdefault(row.day, {"views": 0, "clicks": 0})["clicks"] = row.clicks
            total_clicks += row.clicks

        chart_data = dense_series(
            day_range(window, now),
            buckets,
            empty=lambda: {"views": 0, "clicks": 0},
        )

        logger.debug(
            "Analytics computed",
            page_id=page_id,
            period=window.value,
            views=total_views,
            clicks=total_clicks,
        )

        return AnalyticsReport(
            total_views=total_views,
            total_clicks=total_clicks,
            ctr=click_through_rate(total_clicks, total_views),
            chart_data=[ChartPoint(**point) for point in chart_data],
            device_stats=await self._device_stats(page_id, start),
            top_components=await self._top_components(page_id, start),
            period=window,
        )

    async def _device_stats(self, page_id: int, start: datetime) -> Dict[str, int]:
        result = await self.db.execute(
            select(PageView.device_type, func.count(PageView.id).label("views"))
            .where(PageView.page_id == page_id, PageView.viewed_at >= start)
            .group_by(PageView.device_type)
        )
        stats: Dict[str, int] = {}
        for device_type, views in result.all():
            # null and "unknown" are the same bucket
            device = device_type or DeviceType.UNKNOWN.value
            stats[device] = stats.get(device, 0) + views
        return stats

    async def _top_components(self, page_id: int, start: datetime) -> List[TopComponent]:
        """Clicks grouped by label (type when unlabeled), ties in first-click order"""
        label = func.coalesce(func.nullif(ComponentClick.component_label, ""), ComponentClick.component_type)
        result = await self.db.execute(
            select(
                label.label("label"),
                func.min(ComponentClick.component_type).label("type"),
                func.count(ComponentClick.id).label("clicks"),
            )
            .where(ComponentClick.page_id == page_id, ComponentClick.clicked_at >= start)
            .group_by(label)
            .order_by(func.min(ComponentClick.clicked_at), func.min(ComponentClick.id))
        )
        groups = [{"label": row.label, "type": row.type, "count": row.clicks} for row in result.all()]
        return [TopComponent(**g) for g in top_n(groups, self.top_components_limit)]

    async def get_analytics_summary(self, page_id: int, now: Optional[datetime] = None) -> AnalyticsSummary:
        """Seven-day view and click totals, counted in the database"""
        start = window_start(Period.WEEK, now)

        views = await self.db.scalar(
            select(func.count(PageView.id)).where(PageView.page_id == page_id, PageView.viewed_at >= start)
        )
        clicks = await self.db.scalar(
            select(func.count(ComponentClick.id)).where(
                ComponentClick.page_id == page_id,
                ComponentClick.clicked_at >= start,
            )
        )
        return AnalyticsSummary(views7d=views or 0, clicks7d=clicks or 0)
