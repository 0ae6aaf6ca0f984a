"""
Identity and Ownership

The identity provider hands every authenticated request an opaque id; it is
only ever looked up against ``users.auth_id``. Ownership checks run before
any mutation.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.database.models import Page, User
from bio_storefront.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


async def find_user(db: AsyncSession, auth_id: Optional[str]) -> Optional[User]:
    """User for an auth id, or None when absent or unknown."""
    if not auth_id:
        return None
    result = await db.execute(select(User).where(User.auth_id == auth_id))
    return result.scalar_one_or_none()


async def require_user(db: AsyncSession, auth_id: Optional[str]) -> User:
    """
    Resolve the caller.

    Raises:
        UnauthorizedError: no credential was supplied
        NotFoundError: the credential has no local user
    """
    if not auth_id:
        raise UnauthorizedError("Unauthorized")
    user = await find_user(db, auth_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def get_or_create_user(
    db: AsyncSession,
    auth_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
) -> User:
    """Find the caller's user row, creating it on first use when an email is known."""
    user = await find_user(db, auth_id)
    if user is not None:
        return user
    if not email:
        raise NotFoundError(
            "User not found. Please provide email to create account.",
            details={"code": "USER_NOT_FOUND"},
        )

    user = User(auth_id=auth_id, email=email, name=name)
    db.add(user)
    await db.flush()
    logger.info("Created user", user_id=user.id)
    return user


async def get_page_or_404(db: AsyncSession, page_id: Optional[int]) -> Page:
    if page_id is None:
        raise ValidationError("pageId is required")
    page = await db.get(Page, page_id)
    if page is None:
        raise NotFoundError("Page not found")
    return page


def ensure_owner(page: Page, user: User) -> None:
    if page.user_id != user.id:
        logger.warning("Ownership check failed", page_id=page.id, user_id=user.id)
        raise ForbiddenError("Access denied")


async def get_owned_page(db: AsyncSession, page_id: int, user: User) -> Page:
    """Page ``page_id`` if it exists and belongs to ``user``."""
    page = await get_page_or_404(db, page_id)
    ensure_owner(page, user)
    return page
