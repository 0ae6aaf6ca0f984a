"""
Request Dependencies

The identity provider forwards its opaque user id in a header (see
``SECURITY_AUTH_HEADER``); nothing here verifies it.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import find_user, require_user
from bio_storefront.config import get_settings
from bio_storefront.database import get_db_dependency
from bio_storefront.database.models import User


def get_auth_id(request: Request) -> Optional[str]:
    return request.headers.get(get_settings().security.auth_header) or None


async def current_user(
    auth_id: Optional[str] = Depends(get_auth_id),
    db: AsyncSession = Depends(get_db_dependency),
) -> User:
    """Caller's user row; 401 without a credential, 404 when unknown"""
    return await require_user(db, auth_id)


async def optional_user(
    auth_id: Optional[str] = Depends(get_auth_id),
    db: AsyncSession = Depends(get_db_dependency),
) -> Optional[User]:
    return await find_user(db, auth_id)
