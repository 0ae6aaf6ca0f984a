"""
Legacy Store Adapter

Pages created before the component model keep their catalogue in a single
``stores`` row: a flat product list plus one global discount. When a page has
no product component of its own, the owner's legacy products are rendered as
synthetic product components at read time. Nothing here writes.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.components.schemas import RenderedComponent, SyntheticComponent, render_components
from bio_storefront.config import get_settings
from bio_storefront.config.settings import StorefrontSettings
from bio_storefront.database.models import ComponentType, LegacyStore, Page

logger = structlog.get_logger(__name__)

DEFAULT_BACKGROUND = "linear-gradient(135deg, #fce7f3 0%, #f3e8ff 100%)"


def has_product_component(components: Sequence[RenderedComponent]) -> bool:
    return any(c.type == ComponentType.PRODUCT for c in components)


def synthesize_components(
    store: LegacyStore,
    page_id: int,
    limits: Optional[StorefrontSettings] = None,
) -> List[SyntheticComponent]:
    """
    Map a legacy store onto synthetic components.

    Products keep their array position as ``order_index``; the video, when
    enabled, sorts first with ``order_index = -1``.
    """
    limits = limits or get_settings().storefront
    synthetic: List[SyntheticComponent] = []

    for index, product in enumerate(store.products or []):
        if not isinstance(product, dict):
            logger.warning("Skipping malformed legacy product", store_id=store.id, index=index)
            continue
        synthetic.append(
            SyntheticComponent(
                id=limits.legacy_product_id_offset + index,
                page_id=page_id,
                type=ComponentType.PRODUCT,
                order_index=index,
                config={
                    "id": product.get("id"),
                    "title": product.get("title"),
                    "description": product.get("description"),
                    "image": product.get("image"),
                    "imageScale": product.get("imageScale") or 100,
                    # a zero discount on the product counts as unset
                    "discountPercent": product.get("discountPercent") or store.discount_percent or 0,
                    "kits": product.get("kits") or [],
                },
            )
        )

    if store.video_url and store.show_video:
        synthetic.append(
            SyntheticComponent(
                id=limits.legacy_video_id,
                page_id=page_id,
                type=ComponentType.VIDEO,
                order_index=-1,
                config={
                    "url": store.video_url,
                    "thumbnail": None,
                    "title": "",
                    "showTitle": False,
                },
            )
        )

    synthetic.sort(key=lambda c: c.order_index)
    return synthetic


class LegacyAdapter:
    """
    Read-time fallback from pages to legacy stores.

    Example:
        adapter = LegacyAdapter(db)
        components = await adapter.augment(page_id, stored_components)
    """

    def __init__(self, db: AsyncSession, limits: Optional[StorefrontSettings] = None):
        self.db = db
        self.limits = limits or get_settings().storefront

    async def store_for_user(self, user_id: int) -> Optional[LegacyStore]:
        result = await self.db.execute(
            select(LegacyStore).where(LegacyStore.user_id == user_id).order_by(LegacyStore.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def augment(
        self,
        page_id: int,
        components: Sequence[RenderedComponent],
    ) -> List[RenderedComponent]:
        """Append synthetic legacy products when the page has none of its own."""
        components = list(components)
        if has_product_component(components):
            return components

        page = await self.db.get(Page, page_id)
        if page is None or page.user_id is None:
            return components

        store = await self.store_for_user(page.user_id)
        if store is None:
            return components

        synthetic = synthesize_components(store, page_id, self.limits)
        logger.debug("Legacy fallback applied", page_id=page_id, store_id=store.id, synthesized=len(synthetic))
        return components + synthetic

    async def legacy_page(self, username: str) -> Optional[Dict[str, Any]]:
        """Render a whole legacy store in page shape, or None when there is none."""
        result = await self.db.execute(
            select(LegacyStore).where(LegacyStore.username == username.lower())
        )
        store = result.scalar_one_or_none()
        if store is None:
            return None

        return {
            "id": store.id,
            "user_id": store.user_id,
            "username": store.username,
            "profile_name": store.profile_name,
            "profile_bio": store.profile_bio,
            "profile_image": store.profile_image,
            "profile_image_scale": store.profile_image_scale,
            "whatsapp_number": store.whatsapp_number,
            "whatsapp_message": store.whatsapp_message,
            "background_type": store.theme or "gradient",
            "background_value": DEFAULT_BACKGROUND,
            "views": 0,
            "clicks": 0,
            "is_active": True,
            "legacy": True,
            "created_at": store.created_at.isoformat() if store.created_at else None,
            "updated_at": store.updated_at.isoformat() if store.updated_at else None,
            "components": render_components(synthesize_components(store, store.id, self.limits)),
        }
