"""
Event Recorder

Appends view and click facts and bumps the page's denormalized counters.
The fact row is committed on its own before the counter update; the counter
is a convenience copy, so a failed increment is logged and dropped rather
than failing the request.
"""

from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import get_page_or_404
from bio_storefront.analytics.devices import classify_device
from bio_storefront.database.models import ComponentClick, Page, PageView
from bio_storefront.errors import ValidationError

logger = structlog.get_logger(__name__)


class EventRecorder:
    """
    Write side of page analytics.

    Example:
        recorder = EventRecorder(db)
        await recorder.record_view(page_id, referrer=ref, user_agent=ua)
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_view(
        self,
        page_id: Optional[int],
        referrer: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> PageView:
        page = await get_page_or_404(self.db, page_id)
        page_id = page.id
        device_type = classify_device(user_agent).value

        view = PageView(
            page_id=page_id,
            referrer=referrer,
            user_agent=user_agent,
            device_type=device_type,
        )
        self.db.add(view)
        await self.db.commit()

        await self._increment(page_id, "views")
        logger.debug("View recorded", page_id=page_id, device_type=device_type)
        return view

    async def record_click(
        self,
        page_id: Optional[int],
        component_type: Optional[str],
        component_id: Optional[int] = None,
        component_label: Optional[str] = None,
        target_url: Optional[str] = None,
    ) -> ComponentClick:
        if not component_type:
            raise ValidationError("componentType is required")
        page = await get_page_or_404(self.db, page_id)
        page_id = page.id

        click = ComponentClick(
            page_id=page_id,
            component_id=component_id,
            component_type=component_type,
            component_label=component_label,
            target_url=target_url,
        )
        self.db.add(click)
        await self.db.commit()

        await self._increment(page_id, "clicks")
        logger.debug("Click recorded", page_id=page_id, component_type=component_type)
        return click

    async def _increment(self, page_id: int, counter: str) -> None:
        """
        Atomic ``counter = counter + 1`` on the page row.

        On failure the session is rolled back, which expires every loaded
        instance; callers must not read ORM attributes afterwards.
        """
        column = getattr(Page, counter)
        try:
            await self.db.execute(
                update(Page)
                .where(Page.id == page_id)
                .values({column: column + 1})
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(
                "Counter update failed",
                page_id=page_id,
                counter=counter,
                error=str(e),
            )
