"""
Sales Ledger

Sale facts per page and their windowed revenue rollups.

A sale row carries its own copy of the product and kit labels taken when it
was recorded, so renaming or deleting a product never rewrites history.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.access import get_owned_page
from bio_storefront.analytics.rollups import (
    Period,
    calendar_day,
    day_range,
    dense_series,
    parse_period,
    top_n,
    window_start,
)
from bio_storefront.components.configs import decode_config
from bio_storefront.components.store import ComponentStore
from bio_storefront.config import get_settings
from bio_storefront.database.models import ComponentType, Page, Sale, SaleSource, User, utcnow
from bio_storefront.errors import ForbiddenError, NotFoundError, ValidationError
from bio_storefront.schemas import CamelModel

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


class SaleCreate(BaseModel):
    """Body of a manual sale entry"""

    model_config = ConfigDict(extra="ignore")

    page_id: int
    product_id: str = Field(min_length=1)
    kit_id: str = Field(min_length=1)
    product_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    commission_amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    sale_date: datetime
    product_title: Optional[str] = None
    product_image: Optional[str] = None
    kit_label: Optional[str] = None
    customer_name: Optional[str] = None
    source: SaleSource = SaleSource.MANUAL
    external_order_id: Optional[str] = None
    external_payload: Optional[Dict[str, Any]] = None

    @field_validator("sale_date")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    page_id: int
    user_id: int
    product_id: str
    product_title: str
    product_image: Optional[str] = None
    kit_id: str
    kit_label: str
    product_price: float
    commission_amount: float
    source: SaleSource
    external_order_id: Optional[str] = None
    external_payload: Optional[Dict[str, Any]] = None
    sale_date: datetime
    created_at: Optional[datetime] = None


class SalesDay(CamelModel):
    date: str
    count: int
    revenue: float
    commission: float


class TopProduct(CamelModel):
    product_title: str
    count: int
    revenue: float


class SalesSummary(CamelModel):
    total_sales: int
    total_revenue: float
    total_commission: float
    sales_by_day: List[SalesDay]
    top_products: List[TopProduct]
    period: Period


def _money(value: Decimal) -> float:
    return float(Decimal(value).quantize(CENT))


class SalesLedger:
    """
    Example:
        ledger = SalesLedger(db)
        sale = await ledger.record_sale(user, SaleCreate(**body))
        summary = await ledger.get_sales_summary(sale.page_id, period="7d")
    """

    def __init__(self, db: AsyncSession, top_products_limit: Optional[int] = None):
        self.db = db
        self.top_products_limit = top_products_limit or get_settings().storefront.top_products_limit

    async def resolve_labels(self, page: Page, product_id: str, kit_id: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Current product title and kit label for ``product_id``/``kit_id`` on
        ``page``, looking at stored product components and the legacy store.
        """
        store = ComponentStore(self.db)
        for component in await store.list_rendered(page.id):
            if component.type != ComponentType.PRODUCT:
                continue
            try:
                product = decode_config(ComponentType.PRODUCT, component.config)
            except ValidationError:
                logger.warning("Skipping unreadable product config", page_id=page.id, component_id=component.id)
                continue
            if product.id is None or str(product.id) != product_id:
                continue
            kit = product.find_kit(kit_id)
            return product.title or None, kit.label if kit is not None else None
        return None, None

    async def record_sale(self, user: User, sale_input: SaleCreate) -> Sale:
        page = await get_owned_page(self.db, sale_input.page_id, user)

        product_title = sale_input.product_title
        kit_label = sale_input.kit_label
        if not product_title or not kit_label:
            current_title, current_kit = await self.resolve_labels(page, sale_input.product_id, sale_input.kit_id)
            product_title = product_title or current_title or sale_input.product_id
            kit_label = kit_label or current_kit or sale_input.kit_id

        payload = dict(sale_input.external_payload or {})
        if sale_input.customer_name:
            payload["customer_name"] = sale_input.customer_name

        sale = Sale(
            page_id=page.id,
            user_id=user.id,
            product_id=sale_input.product_id,
            product_title=product_title,
            product_image=sale_input.product_image,
            kit_id=sale_input.kit_id,
            kit_label=kit_label,
            product_price=sale_input.product_price,
            commission_amount=sale_input.commission_amount,
            source=sale_input.source,
            external_order_id=sale_input.external_order_id,
            external_payload=payload or None,
            sale_date=sale_input.sale_date,
        )
        self.db.add(sale)
        await self.db.flush()

        logger.info(
            "Sale recorded",
            sale_id=sale.id,
            page_id=page.id,
            product_id=sale.product_id,
            source=sale.source.value,
        )
        return sale

    async def list_sales(self, page_id: int, period: Optional[str] = None, now: Optional[datetime] = None) -> List[Sale]:
        window = parse_period(period, default=Period.MONTH)
        result = await self.db.execute(
            select(Sale)
            .where(Sale.page_id == page_id, Sale.sale_date >= window_start(window, now))
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
        )
        return list(result.scalars().all())

    async def get_sales_summary(
        self,
        page_id: int,
        period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SalesSummary:
        window = parse_period(period, default=Period.MONTH)
        now = now or utcnow()
        start = window_start(window, now)

        sale_day = calendar_day(Sale.sale_date)
        daily = await self.db.execute(
            select(
                sale_day.label("day"),
                func.count(Sale.id).label("sales"),
                func.sum(Sale.product_price).label("revenue"),
                func.sum(Sale.commission_amount).label("commission"),
            )
            .where(Sale.page_id == page_id, Sale.sale_date >= start)
            .group_by(sale_day)
        )

        buckets: Dict = {}
        total_sales = 0
        total_revenue = Decimal(0)
        total_commission = Decimal(0)
        for row in daily.all():
            revenue = Decimal(row.revenue or 0)
            commission = Decimal(row.commission or 0)
            buckets[row.day] = {"count": row.sales, "revenue": revenue, "commission": commission}
            total_sales += row.sales
            total_revenue += revenue
            total_commission += commission

        series = dense_series(
            day_range(window, now),
            buckets,
            empty=lambda: {"count": 0, "revenue": Decimal(0), "commission": Decimal(0)},
        )

        return SalesSummary(
            total_sales=total_sales,
            total_revenue=_money(total_revenue),
            total_commission=_money(total_commission),
            sales_by_day=[
                SalesDay(
                    date=point["date"],
                    count=point["count"],
                    revenue=_money(point["revenue"]),
                    commission=_money(point["commission"]),
                )
                for point in series
            ],
            top_products=await self._top_products(page_id, start),
            period=window,
        )

    async def _top_products(self, page_id: int, start: datetime) -> List[TopProduct]:
        """Sales grouped by product id, ties in first-sale order; the earliest title names the group"""
        result = await self.db.execute(
            select(
                Sale.product_id,
                func.count(Sale.id).label("sales"),
                func.sum(Sale.product_price).label("revenue"),
            )
            .where(Sale.page_id == page_id, Sale.sale_date >= start)
            .group_by(Sale.product_id)
            .order_by(func.min(Sale.sale_date), func.min(Sale.id))
        )
        groups = [
            {"product_id": row.product_id, "count": row.sales, "revenue": row.revenue}
            for row in result.all()
        ]
        ranked = top_n(groups, self.top_products_limit)
        if not ranked:
            return []

        titles: Dict[str, str] = {}
        result = await self.db.execute(
            select(Sale.product_id, Sale.product_title)
            .where(
                Sale.page_id == page_id,
                Sale.sale_date >= start,
                Sale.product_id.in_([p["product_id"] for p in ranked]),
            )
            .order_by(Sale.sale_date, Sale.id)
        )
        for product_id, title in result.all():
            titles.setdefault(product_id, title)

        return [
            TopProduct(product_title=titles[p["product_id"]], count=p["count"], revenue=_money(p["revenue"]))
            for p in ranked
        ]

    async def delete_sale(self, sale_id: int, user: User) -> None:
        result = await self.db.execute(
            select(Sale, Page.user_id)
            .join(Page, Page.id == Sale.page_id)
            .where(Sale.id == sale_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError("Sale not found")
        sale, owner_id = row
        if owner_id != user.id:
            logger.warning("Sale ownership check failed", sale_id=sale_id, user_id=user.id)
            raise ForbiddenError("Access denied")

        await self.db.delete(sale)
        await self.db.flush()
        logger.info("Sale deleted", sale_id=sale_id, page_id=sale.page_id)
