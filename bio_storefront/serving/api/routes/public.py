"""
Public Landing Endpoints
"""

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.database import get_db_dependency
from bio_storefront.pages import PageService

router = APIRouter()


@router.get("/stats")
async def public_stats(db: AsyncSession = Depends(get_db_dependency)) -> Dict[str, int]:
    """Page count and summed view/click counters across all pages."""
    return await PageService(db).public_stats()
