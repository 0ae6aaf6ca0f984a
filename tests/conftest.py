"""
Test Suite Configuration
"""
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from bio_storefront.database import Database
from bio_storefront.database.models import (
    ComponentType,
    LegacyStore,
    Page,
    PageComponent,
    User,
)
from bio_storefront.main import create_app

OWNER_AUTH = "auth-owner"
STRANGER_AUTH = "auth-stranger"


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """In-memory SQLite database with the full schema"""
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.connect(create_tables=True)
    yield database
    await database.dispose()


@pytest.fixture
async def db(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting data"""
    session = database.session_factory()
    yield session
    await session.close()


@pytest.fixture
async def owner(db: AsyncSession) -> User:
    user = User(auth_id=OWNER_AUTH, email="owner@example.com", name="Owner")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def stranger(db: AsyncSession) -> User:
    user = User(auth_id=STRANGER_AUTH, email="stranger@example.com", name="Stranger")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def page(db: AsyncSession, owner: User) -> Page:
    page = Page(user_id=owner.id, username="maria", profile_name="Maria")
    db.add(page)
    await db.commit()
    return page


@pytest.fixture
async def components(db: AsyncSession, page: Page) -> list:
    """Three visible blocks plus a hidden one, indices 0..3"""
    rows = [
        PageComponent(page_id=page.id, type=ComponentType.TEXT, order_index=0, config={"content": "Hello"}),
        PageComponent(page_id=page.id, type=ComponentType.BUTTON, order_index=1, config={"text": "Chat", "type": "whatsapp"}),
        PageComponent(page_id=page.id, type=ComponentType.LINK, order_index=2, config={"text": "Blog", "url": "https://blog.example.com"}),
        PageComponent(page_id=page.id, type=ComponentType.TEXT, order_index=3, config={"content": "Draft"}, is_visible=False),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.fixture
def legacy_products() -> list:
    return [
        {
            "id": "serum",
            "title": "Vitamin C Serum",
            "description": "30ml",
            "image": "https://cdn.example.com/serum.png",
            "kits": [
                {"id": "k1", "label": "1 bottle", "price": 89.9, "link": "https://pay.example.com/k1"},
                {"id": "k3", "label": "3 bottles", "price": 219.9, "link": "https://pay.example.com/k3"},
            ],
        },
        {
            "id": "cream",
            "title": "Night Cream",
            "discountPercent": 15,
            "imageScale": 120,
        },
    ]


@pytest.fixture
async def legacy_store(db: AsyncSession, owner: User, legacy_products: list) -> LegacyStore:
    store = LegacyStore(
        user_id=owner.id,
        username="maria-loja",
        profile_name="Maria Store",
        theme="dark",
        products=legacy_products,
        discount_percent=10,
        video_url="https://video.example.com/intro.mp4",
        show_video=True,
    )
    db.add(store)
    await db.commit()
    return store


@pytest.fixture
def app(database: Database):
    return create_app(database=database)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def owner_headers(owner: User) -> dict:
    return {"X-User-Id": OWNER_AUTH}


@pytest.fixture
def stranger_headers(stranger: User) -> dict:
    return {"X-User-Id": STRANGER_AUTH}
