"""
Page and Component Endpoints

Page CRUD, the public username lookup and the component list of a page.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import ensure_owner, get_page_or_404
from bio_storefront.components import ComponentStore, render_components
from bio_storefront.components.schemas import ComponentCreate, ReorderRequest, render_component
from bio_storefront.database import get_db_dependency
from bio_storefront.database.models import User
from bio_storefront.errors import UnauthorizedError
from bio_storefront.pages import PageService, render_page
from bio_storefront.serving.api.dependencies import current_user, get_auth_id, optional_user

router = APIRouter()


class PageCreate(BaseModel):
    username: Optional[str] = None
    profile_name: Optional[str] = None
    email: Optional[str] = None


@router.get("")
async def list_pages(
    user: Optional[User] = Depends(optional_user),
    auth_id: Optional[str] = Depends(get_auth_id),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[Dict[str, Any]]:
    """Caller's pages, oldest first. An unknown caller simply has none."""
    if not auth_id:
        raise UnauthorizedError("Unauthorized")
    pages = await PageService(db).list_pages(user)
    return [render_page(page) for page in pages]


@router.post("")
async def create_page(
    body: PageCreate,
    auth_id: Optional[str] = Depends(get_auth_id),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    if not auth_id:
        raise UnauthorizedError("Unauthorized")
    page = await PageService(db).create_page(
        auth_id,
        body.username,
        profile_name=body.profile_name,
        email=body.email,
    )
    return render_page(page)


@router.get("/check-username/{username}")
async def check_username(username: str, db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, bool]:
    return {"available": await PageService(db).check_username(username)}


@router.get("/username/{username}")
async def get_public_page(username: str, db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, Any]:
    """Published page with visible components, or a legacy store in page shape."""
    return await PageService(db).get_public_page(username)


@router.get("/{page_id}")
async def get_page(
    page_id: int,
    user: Optional[User] = Depends(optional_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    return await PageService(db).get_page(page_id, user)


@router.patch("/{page_id}")
async def update_page(
    page_id: int,
    patch: Dict[str, Any] = Body(...),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    page = await PageService(db).update_page(page_id, user, patch)
    return render_page(page)


@router.delete("/{page_id}")
async def delete_page(
    page_id: int,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, bool]:
    await PageService(db).delete_page(page_id, user)
    return {"success": True}


@router.get("/{page_id}/components")
async def list_components(
    page_id: int,
    user: Optional[User] = Depends(optional_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[Dict[str, Any]]:
    """
    Components in rendering order, with legacy products appended when the
    page has no product component. An identified caller must own the page.
    """
    if user is not None:
        page = await get_page_or_404(db, page_id)
        ensure_owner(page, user)
    components = await ComponentStore(db).list_rendered(page_id)
    return render_components(components)


@router.post("/{page_id}/components")
async def add_component(
    page_id: int,
    body: ComponentCreate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    component = await ComponentStore(db).add_component(page_id, user, body.type, body.config)
    return render_component(component)


@router.post("/{page_id}/reorder")
async def reorder_components(
    page_id: int,
    body: ReorderRequest,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, bool]:
    await ComponentStore(db).reorder_components(page_id, user, body.componentIds)
    return {"success": True}
