"""
Component Store

Ordered, typed content blocks per page. Rendering order is ascending
``order_index`` with ``id`` breaking ties; indices may have gaps.

Every mutation takes the calling user and checks page ownership first.
Synthetic legacy components are never accepted here.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import get_owned_page
from bio_storefront.components.configs import decode_config, parse_component_type
from bio_storefront.components.legacy import LegacyAdapter
from bio_storefront.components.schemas import RenderedComponent, SyntheticComponent
from bio_storefront.database.models import Page, PageComponent, User, utcnow
from bio_storefront.errors import ForbiddenError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"config", "is_visible", "order_index"})


def _persisted_id(component_id: Any) -> int:
    if isinstance(component_id, SyntheticComponent):
        raise ValidationError("Synthetic components are read-only")
    if isinstance(component_id, bool) or not isinstance(component_id, int):
        raise ValidationError("Component id must be an integer")
    return component_id


class ComponentStore:
    """
    Persistence for page components.

    Example:
        store = ComponentStore(db)
        block = await store.add_component(page_id, user, "text", {"content": "hi"})
        await store.reorder_components(page_id, user, [block.id, other.id])
    """

    def __init__(self, db: AsyncSession, legacy: Optional[LegacyAdapter] = None):
        self.db = db
        self.legacy = legacy or LegacyAdapter(db)

    async def list_components(self, page_id: int, visible_only: bool = False) -> List[PageComponent]:
        """Stored components in rendering order"""
        query = (
            select(PageComponent)
            .where(PageComponent.page_id == page_id)
            .order_by(PageComponent.order_index, PageComponent.id)
            # bulk reorders bypass the identity map
            .execution_options(populate_existing=True)
        )
        if visible_only:
            query = query.where(PageComponent.is_visible.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_rendered(self, page_id: int, visible_only: bool = False) -> List[RenderedComponent]:
        """
        Stored components plus the legacy product fallback.

        Whether the fallback applies is decided over every stored component,
        hidden ones included; ``visible_only`` then drops hidden stored rows.
        """
        components = await self.legacy.augment(page_id, await self.list_components(page_id))
        if visible_only:
            components = [c for c in components if c.is_visible]
        return components

    async def get_owned_component(self, component_id: int, user: User) -> PageComponent:
        result = await self.db.execute(
            select(PageComponent, Page.user_id)
            .join(Page, Page.id == PageComponent.page_id)
            .where(PageComponent.id == _persisted_id(component_id))
        )
        row = result.first()
        if row is None:
            raise NotFoundError("Component not found")
        component, owner_id = row
        if owner_id != user.id:
            logger.warning("Component ownership check failed", component_id=component.id, user_id=user.id)
            raise ForbiddenError("Access denied")
        return component

    async def add_component(
        self,
        page_id: int,
        user: User,
        component_type: Any,
        config: Optional[Dict[str, Any]] = None,
    ) -> PageComponent:
        """
        Append a component after the current last one.

        Raises:
            NotFoundError: page missing or not owned by ``user``
            ValidationError: unknown type or config that does not fit it
        """
        kind = parse_component_type(component_type)
        decoded = decode_config(kind, config)

        page = await self.db.get(Page, page_id)
        if page is None or page.user_id != user.id:
            raise NotFoundError("Page not found")

        result = await self.db.execute(
            select(func.max(PageComponent.order_index)).where(PageComponent.page_id == page_id)
        )
        current_max = result.scalar()
        order_index = 0 if current_max is None else current_max + 1

        component = PageComponent(
            page_id=page_id,
            type=kind,
            order_index=order_index,
            config=decoded.to_json(),
            is_visible=True,
        )
        self.db.add(component)
        await self.db.flush()

        logger.info("Component added", page_id=page_id, component_id=component.id, type=kind.value)
        return component

    async def reorder_components(self, page_id: int, user: User, component_ids: Sequence[Any]) -> None:
        """
        Assign ``order_index = position`` to each id in one statement.

        Ids not listed keep their current index. All ids must belong to the
        page; otherwise nothing is written.
        """
        page = await get_owned_page(self.db, page_id, user)

        if not isinstance(component_ids, (list, tuple)):
            raise ValidationError("componentIds must be an array")
        ids = [_persisted_id(cid) for cid in component_ids]
        if len(set(ids)) != len(ids):
            raise ValidationError("componentIds must not contain duplicates")
        if not ids:
            return

        result = await self.db.execute(
            select(PageComponent.id).where(
                PageComponent.page_id == page.id,
                PageComponent.id.in_(ids),
            )
        )
        owned = set(result.scalars().all())
        foreign = [cid for cid in ids if cid not in owned]
        if foreign:
            raise ValidationError(
                "Components do not belong to this page",
                details={"componentIds": foreign},
            )

        now = utcnow()
        await self.db.execute(
            update(PageComponent),
            [{"id": cid, "order_index": position, "updated_at": now} for position, cid in enumerate(ids)],
        )
        logger.info("Components reordered", page_id=page.id, count=len(ids))

    async def update_component(self, component_id: int, user: User, patch: Dict[str, Any]) -> PageComponent:
        """
        Apply a partial update limited to config, visibility and position.

        A new config replaces the old one and is validated against the
        component's type.
        """
        if not isinstance(patch, dict):
            raise ValidationError("Update body must be an object")
        unknown = sorted(set(patch) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Fields cannot be updated",
                details={"fields": unknown},
            )

        component = await self.get_owned_component(component_id, user)

        if "config" in patch:
            component.config = decode_config(component.type, patch["config"]).to_json()
        if "is_visible" in patch:
            if not isinstance(patch["is_visible"], bool):
                raise ValidationError("is_visible must be a boolean")
            component.is_visible = patch["is_visible"]
        if "order_index" in patch:
            value = patch["order_index"]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError("order_index must be an integer")
            component.order_index = value

        component.updated_at = utcnow()
        await self.db.flush()

        logger.info("Component updated", component_id=component.id, fields=sorted(patch))
        return component

    async def delete_component(self, component_id: int, user: User) -> None:
        component = await self.get_owned_component(component_id, user)
        await self.db.delete(component)
        await self.db.flush()
        logger.info("Component deleted", component_id=component.id, page_id=component.page_id)

