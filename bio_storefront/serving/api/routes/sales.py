"""
Sales API Endpoints

Owner-only manual sale entry, listing and revenue rollups.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import get_owned_page
from bio_storefront.database import get_db_dependency
from bio_storefront.database.models import User
from bio_storefront.sales import SaleCreate, SaleOut, SalesLedger
from bio_storefront.serving.api.dependencies import current_user

router = APIRouter()


@router.post("")
async def create_sale(
    body: SaleCreate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    sale = await SalesLedger(db).record_sale(user, body)
    return SaleOut.model_validate(sale).model_dump(mode="json")


@router.get("/{page_id}")
async def list_sales(
    page_id: int,
    period: Optional[str] = Query(default=None, description="1d, 7d or 30d"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> List[Dict[str, Any]]:
    """Sales in the window, newest first."""
    await get_owned_page(db, page_id, user)
    sales = await SalesLedger(db).list_sales(page_id, period)
    return [SaleOut.model_validate(sale).model_dump(mode="json") for sale in sales]


@router.get("/{page_id}/summary")
async def get_sales_summary(
    page_id: int,
    period: Optional[str] = Query(default=None, description="1d, 7d or 30d"),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, Any]:
    await get_owned_page(db, page_id, user)
    summary = await SalesLedger(db).get_sales_summary(page_id, period)
    return summary.to_json()


@router.delete("/sale/{sale_id}")
async def delete_sale(
    sale_id: int,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db_dependency),
) -> Dict[str, bool]:
    await SalesLedger(db).delete_sale(sale_id, user)
    return {"ok": True}
