"""
Single Component Endpoints
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.components import ComponentStore
from bio_storefront.components.schemas import render_component
from bio_storefront.database import get_db_dependency
from bio_storefront.database.models import User
from bio_storefront.serving.api.dependencies import current_user

router = APIRouter()


@router.patch("/{component_id}")
async def update_component(
    component_id: int,
    patch: Dict[str, Any] = Body(...),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    """Partial update of config, is_visible or order_index."""
    component = await ComponentStore(db).update_component(component_id, user, patch)
    return render_component(component)


@router.delete("/{component_id}")
async def delete_component(
    component_id: int,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, bool]:
    await ComponentStore(db).delete_component(component_id, user)
    return {"success": True}
