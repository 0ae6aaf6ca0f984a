"""
Database Models

Pages own ordered components; views, clicks and sales are immutable fact
tables hanging off a page. Rollups are never stored, they are recomputed
from the fact tables on request.

Identity:
- User: local row for an identity-provider account
- Page: published bio page, addressed by a unique lowercase username

Composition:
- PageComponent: typed, ordered content block with a polymorphic JSON config
- LegacyStore: pre-component flat product list, read only

Facts:
- PageView, ComponentClick, Sale
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, List

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Naive UTC timestamp; every stored datetime is naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ComponentType(str, Enum):
    """Component type enumeration"""
    BUTTON = "button"
    TEXT = "text"
    PRODUCT = "product"
    VIDEO = "video"
    SOCIAL = "social"
    LINK = "link"
    CAROUSEL = "carousel"
    CALENDLY = "calendly"
    MAPS = "maps"
    PIX = "pix"
    STORIES = "stories"


class DeviceType(str, Enum):
    """Device class derived from a user agent"""
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    UNKNOWN = "unknown"


class SaleSource(str, Enum):
    """Where a sale record came from"""
    MANUAL = "manual"
    WEBHOOK = "webhook"
    HOTMART = "hotmart"
    KIWIFY = "kiwify"
    MONETIZZE = "monetizze"


# =============================================================================
# IDENTITY
# =============================================================================

class User(Base):
    """
    User Table

    Local mirror of an identity-provider account. ``auth_id`` is the opaque
    id the provider hands us on every authenticated request.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    name: Mapped[Optional[str]] = mapped_column(String(200))
    plan: Mapped[str] = mapped_column(String(50), default="free")
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(100))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    pages: Mapped[List["Page"]] = relationship(back_populates="user")


class Page(Base):
    """
    Page Table

    Identity root of a published storefront. ``views`` and ``clicks`` are
    denormalized counters; the fact tables remain the source of truth.
    """
    __tablename__ = "pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL")
    )
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Profile
    profile_name: Mapped[str] = mapped_column(String(200), default="Minha Página")
    profile_bio: Mapped[Optional[str]] = mapped_column(Text)
    profile_image: Mapped[Optional[str]] = mapped_column(Text)
    profile_image_scale: Mapped[Optional[int]] = mapped_column(Integer)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(30))
    whatsapp_message: Mapped[Optional[str]] = mapped_column(Text)
    font_family: Mapped[Optional[str]] = mapped_column(String(100))

    # Background
    background_type: Mapped[Optional[str]] = mapped_column(String(30))
    background_value: Mapped[Optional[str]] = mapped_column(Text)
    background_image: Mapped[Optional[str]] = mapped_column(Text)

    # Denormalized counters
    views: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    clicks: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    user: Mapped[Optional["User"]] = relationship(back_populates="pages")
    components: Mapped[List["PageComponent"]] = relationship(
        back_populates="page",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_pages_user", "user_id"),
    )


# =============================================================================
# COMPOSITION
# =============================================================================

class PageComponent(Base):
    """
    Page Component Table

    One typed content block. Rendered ascending by ``order_index``, ties by
    ``id``. Gaps in ``order_index`` are expected after deletes.
    """
    __tablename__ = "page_components"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    page_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[ComponentType] = mapped_column(
        SQLEnum(ComponentType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    config: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    page: Mapped["Page"] = relationship(back_populates="components")

    __table_args__ = (
        Index("ix_page_components_page_order", "page_id", "order_index"),
    )


class LegacyStore(Base):
    """
    Legacy Store Table

    Flat product list with a single global discount, predating the component
    model. Read only.
    """
    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"))
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    profile_name: Mapped[Optional[str]] = mapped_column(String(200))
    profile_bio: Mapped[Optional[str]] = mapped_column(Text)
    profile_image: Mapped[Optional[str]] = mapped_column(Text)
    profile_image_scale: Mapped[Optional[int]] = mapped_column(Integer)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(30))
    whatsapp_message: Mapped[Optional[str]] = mapped_column(Text)
    theme: Mapped[Optional[str]] = mapped_column(String(30))

    products: Mapped[Optional[list]] = mapped_column(JSONType)
    discount_percent: Mapped[Optional[int]] = mapped_column(Integer)
    video_url: Mapped[Optional[str]] = mapped_column(Text)
    show_video: Mapped[bool] = mapped_column(Boolean, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        Index("ix_stores_user", "user_id"),
    )


# =============================================================================
# FACT TABLES
# =============================================================================

class PageView(Base):
    """
    Page View Fact Table

    One row per public render of a page.
    """
    __tablename__ = "page_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    page_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    referrer: Mapped[Optional[str]] = mapped_column(String(2000))
    user_agent: Mapped[Optional[str]] = mapped_column(String(1000))
    device_type: Mapped[Optional[str]] = mapped_column(String(20))

    __table_args__ = (
        Index("ix_page_views_page_time", "page_id", "viewed_at"),
    )


class ComponentClick(Base):
    """
    Component Click Fact Table

    One row per interaction with a page element. Labels are captured at
    click time so rankings survive component edits and deletes.
    """
    __tablename__ = "component_clicks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    page_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False
    )
    component_id: Mapped[Optional[int]] = mapped_column(Integer)
    component_type: Mapped[str] = mapped_column(String(30), nullable=False)
    component_label: Mapped[Optional[str]] = mapped_column(String(500))
    target_url: Mapped[Optional[str]] = mapped_column(String(2000))
    clicked_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("ix_component_clicks_page_time", "page_id", "clicked_at"),
    )


class Sale(Base):
    """
    Sale Fact Table

    Product and kit labels are copied onto the row when the sale is recorded;
    later product edits never rewrite history.
    """
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    page_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    # Denormalized product snapshot
    product_id: Mapped[str] = mapped_column(String(100), nullable=False)
    product_title: Mapped[str] = mapped_column(String(500), nullable=False)
    product_image: Mapped[Optional[str]] = mapped_column(Text)
    kit_id: Mapped[str] = mapped_column(String(100), nullable=False)
    kit_label: Mapped[str] = mapped_column(String(500), nullable=False)

    # Measures
    product_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    source: Mapped[SaleSource] = mapped_column(
        SQLEnum(SaleSource, values_callable=lambda e: [m.value for m in e]),
        default=SaleSource.MANUAL,
    )
    external_order_id: Mapped[Optional[str]] = mapped_column(String(200))
    external_payload: Mapped[Optional[dict]] = mapped_column(JSONType)

    sale_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )

    __table_args__ = (
        Index("ix_sales_page_date", "page_id", "sale_date"),
    )
