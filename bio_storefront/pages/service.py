"""
Page Service

Creation, editing and public lookup of bio pages.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import ensure_owner, get_or_create_user, get_owned_page, get_page_or_404
from bio_storefront.components.legacy import LegacyAdapter
from bio_storefront.components.schemas import render_components
from bio_storefront.components.store import ComponentStore
from bio_storefront.config import get_settings
from bio_storefront.database.models import LegacyStore, Page, PageComponent, User, utcnow
from bio_storefront.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

DEFAULT_PROFILE_NAME = "Minha Página"


class PagePatch(BaseModel):
    """Editable profile and background fields"""

    model_config = ConfigDict(extra="forbid")

    profile_name: Optional[str] = None
    profile_bio: Optional[str] = None
    profile_image: Optional[str] = None
    profile_image_scale: Optional[int] = None
    whatsapp_number: Optional[str] = None
    whatsapp_message: Optional[str] = None
    font_family: Optional[str] = None
    background_type: Optional[str] = None
    background_value: Optional[str] = None
    background_image: Optional[str] = None
    is_active: Optional[bool] = None


class PageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    username: str
    profile_name: str
    profile_bio: Optional[str] = None
    profile_image: Optional[str] = None
    profile_image_scale: Optional[int] = None
    whatsapp_number: Optional[str] = None
    whatsapp_message: Optional[str] = None
    font_family: Optional[str] = None
    background_type: Optional[str] = None
    background_value: Optional[str] = None
    background_image: Optional[str] = None
    views: int = 0
    clicks: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def render_page(page: Page, components: Optional[List[Any]] = None) -> Dict[str, Any]:
    body = PageOut.model_validate(page).model_dump(mode="json")
    if components is not None:
        body["components"] = render_components(components)
    return body


def normalize_username(username: Optional[str]) -> str:
    if not username or not username.strip():
        raise ValidationError("Username is required")
    return username.strip().lower()


class PageService:
    """
    Example:
        pages = PageService(db)
        page = await pages.create_page(auth_id, "maria", email="maria@example.com")
        public = await pages.get_public_page("Maria")
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.components = ComponentStore(db)

    async def list_pages(self, user: Optional[User]) -> List[Page]:
        if user is None:
            return []
        result = await self.db.execute(
            select(Page).where(Page.user_id == user.id).order_by(Page.created_at, Page.id)
        )
        return list(result.scalars().all())

    async def create_page(
        self,
        auth_id: str,
        username: Optional[str],
        profile_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Page:
        """
        Raises:
            ValidationError: missing or taken username, or page limit reached
            NotFoundError: first use without an email to create the user
        """
        username = normalize_username(username)
        user = await get_or_create_user(self.db, auth_id, email=email)

        limit = get_settings().storefront.max_pages_per_user
        owned = await self.db.scalar(select(func.count(Page.id)).where(Page.user_id == user.id))
        if owned >= limit:
            raise ValidationError(f"Maximum pages limit reached ({limit})")

        if await self._page_username_taken(username):
            raise ValidationError("Username already taken")

        page = Page(
            user_id=user.id,
            username=username,
            profile_name=profile_name or DEFAULT_PROFILE_NAME,
        )
        self.db.add(page)
        await self.db.flush()

        logger.info("Page created", page_id=page.id, user_id=user.id, username=username)
        return page

    async def get_page(self, page_id: int, user: Optional[User] = None) -> Dict[str, Any]:
        """Page with all stored components; an identified caller must own it."""
        page = await get_page_or_404(self.db, page_id)
        if user is not None:
            ensure_owner(page, user)
        components = await self.components.list_components(page.id)
        return render_page(page, components)

    async def update_page(self, page_id: int, user: User, patch: Dict[str, Any]) -> Page:
        if not isinstance(patch, dict):
            raise ValidationError("Update body must be an object")
        try:
            changes = PagePatch.model_validate(patch).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid page update",
                details={"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]},
            )
        if changes.get("profile_name") is None:
            changes.pop("profile_name", None)

        page = await get_owned_page(self.db, page_id, user)
        for field, value in changes.items():
            setattr(page, field, value)
        page.updated_at = utcnow()
        await self.db.flush()

        logger.info("Page updated", page_id=page.id, fields=sorted(changes))
        return page

    async def delete_page(self, page_id: int, user: User) -> None:
        page = await get_owned_page(self.db, page_id, user)
        # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled
        await self.db.execute(delete(PageComponent).where(PageComponent.page_id == page.id))
        await self.db.delete(page)
        await self.db.flush()
        logger.info("Page deleted", page_id=page_id, user_id=user.id)

    async def get_public_page(self, username: str) -> Dict[str, Any]:
        """
        Published page by username with its visible components.

        Falls back to a legacy store of the same name. Does not count a view;
        the client records one separately.
        """
        username = normalize_username(username)
        result = await self.db.execute(
            select(Page).where(Page.username == username, Page.is_active.is_(True))
        )
        page = result.scalar_one_or_none()
        if page is not None:
            components = await self.components.list_rendered(page.id, visible_only=True)
            return render_page(page, components)

        legacy = await LegacyAdapter(self.db).legacy_page(username)
        if legacy is None:
            raise NotFoundError("Page not found")
        logger.debug("Served legacy store as page", username=username)
        return legacy

    async def _page_username_taken(self, username: str) -> bool:
        page_id = await self.db.scalar(select(Page.id).where(Page.username == username))
        return page_id is not None

    async def check_username(self, username: str) -> bool:
        """True when neither a page nor a legacy store claims ``username``"""
        username = normalize_username(username)
        if await self._page_username_taken(username):
            return False
        store_id = await self.db.scalar(select(LegacyStore.id).where(LegacyStore.username == username))
        return store_id is None

    async def public_stats(self) -> Dict[str, int]:
        row = (
            await self.db.execute(
                select(
                    func.count(Page.id),
                    func.coalesce(func.sum(Page.views), 0),
                    func.coalesce(func.sum(Page.clicks), 0),
                )
            )
        ).one()
        pages, views, clicks = row
        return {"pages": pages, "views": int(views), "clicks": int(clicks)}
