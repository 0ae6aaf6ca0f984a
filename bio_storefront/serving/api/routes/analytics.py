"""
Analytics API Endpoints

Public event intake plus owner-only rollups.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import get_owned_page
from bio_storefront.analytics import AnalyticsAggregator, EventRecorder
from bio_storefront.database import get_db_dependency
from bio_storefront.database.models import User
from bio_storefront.schemas import CamelModel
from bio_storefront.serving.api.dependencies import current_user

router = APIRouter()


class ViewEvent(CamelModel):
    page_id: Optional[int] = None
    referrer: Optional[str] = None
    user_agent: Optional[str] = None


class ClickEvent(CamelModel):
    page_id: Optional[int] = None
    component_id: Optional[int] = None
    component_type: Optional[str] = None
    component_label: Optional[str] = None
    target_url: Optional[str] = None


@router.post("/view")
async def record_view(event: ViewEvent, db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, bool]:
    await EventRecorder(db).record_view(
        event.page_id,
        referrer=event.referrer or None,
        user_agent=event.user_agent or None,
    )
    return {"ok": True}


@router.post("/click")
async def record_click(event: ClickEvent, db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, bool]:
    await EventRecorder(db).record_click(
        event.page_id,
        event.component_type,
        component_id=event.component_id,
        component_label=event.component_label or None,
        target_url=event.target_url or None,
    )
    return {"ok": True}


@router.get("/{page_id}")
async def get_analytics(
    page_id: int,
    period: Optional[str] = Query(default=None, description="1d, 7d or 30d"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    await get_owned_page(db, page_id, user)
    report = await AnalyticsAggregator(db).get_analytics(page_id, period)
    return report.to_json()


@router.get("/{page_id}/summary")
async def get_analytics_summary(
    page_id: int,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, int]:
    await get_owned_page(db, page_id, user)
    summary = await AnalyticsAggregator(db).get_analytics_summary(page_id)
    return summary.to_json()
