"""
Unit Tests - Page Service
"""
import pytest
from sqlalchemy import select

from bio_storefront.database.models import ComponentType, Page, PageComponent, User
from bio_storefront.errors import ForbiddenError, NotFoundError, ValidationError
from bio_storefront.pages import PageService


class TestCreatePage:
    """Tests for page creation"""

    async def test_creates_user_on_first_use(self, db):
        """Test first page for a new identity creates its user"""
        page = await PageService(db).create_page("auth-new", "NewShop", email="new@example.com")

        user = (await db.execute(select(User).where(User.auth_id == "auth-new"))).scalar_one()
        assert page.user_id == user.id
        assert page.username == "newshop"
        assert page.profile_name == "Minha Página"

    async def test_unknown_user_without_email(self, db):
        """Test an email is needed to create the user"""
        with pytest.raises(NotFoundError) as exc_info:
            await PageService(db).create_page("auth-ghost", "ghost")

        assert exc_info.value.details == {"code": "USER_NOT_FOUND"}

    async def test_username_required(self, db, owner):
        """Test blank username"""
        with pytest.raises(ValidationError):
            await PageService(db).create_page(owner.auth_id, "  ")

    async def test_username_unique_case_insensitive(self, db, page, owner):
        """Test a different case still collides"""
        with pytest.raises(ValidationError):
            await PageService(db).create_page(owner.auth_id, "MARIA")

    async def test_page_limit(self, db, owner):
        """Test twenty pages per user"""
        db.add_all([Page(user_id=owner.id, username=f"page{i}") for i in range(20)])
        await db.commit()

        with pytest.raises(ValidationError):
            await PageService(db).create_page(owner.auth_id, "one-more")


class TestReadPages:
    """Tests for page reads"""

    async def test_list_pages_oldest_first(self, db, owner, page):
        """Test only the caller's pages"""
        db.add(Page(user_id=None, username="nobody"))
        await db.commit()

        pages = await PageService(db).list_pages(owner)

        assert [p.username for p in pages] == ["maria"]

    async def test_list_pages_unknown_user(self, db):
        """Test an unknown caller has no pages"""
        assert await PageService(db).list_pages(None) == []

    async def test_get_page_with_components(self, db, page, owner, components):
        """Test owner view includes hidden components"""
        body = await PageService(db).get_page(page.id, owner)

        assert body["username"] == "maria"
        assert len(body["components"]) == 4

    async def test_get_page_anonymous(self, db, page, components):
        """Test reading without credentials"""
        body = await PageService(db).get_page(page.id)

        assert body["id"] == page.id

    async def test_get_page_foreign_user(self, db, page, stranger):
        """Test another identified user is refused"""
        with pytest.raises(ForbiddenError):
            await PageService(db).get_page(page.id, stranger)


class TestUpdateDeletePage:
    """Tests for edits"""

    async def test_update_profile(self, db, page, owner):
        """Test editable fields are applied"""
        updated = await PageService(db).update_page(
            page.id, owner, {"profile_bio": "Skincare", "background_type": "solid"}
        )

        assert updated.profile_bio == "Skincare"
        assert updated.background_type == "solid"

    async def test_update_rejects_unknown_fields(self, db, page, owner):
        """Test counters and username are not editable"""
        with pytest.raises(ValidationError) as exc_info:
            await PageService(db).update_page(page.id, owner, {"views": 1000})

        assert exc_info.value.details["fields"] == ["views"]

    async def test_update_non_owner(self, db, page, stranger):
        """Test ownership"""
        with pytest.raises(ForbiddenError):
            await PageService(db).update_page(page.id, stranger, {"profile_bio": "x"})

    async def test_delete_removes_components(self, db, page, owner, components):
        """Test page and components are gone"""
        page_id = page.id

        await PageService(db).delete_page(page_id, owner)

        assert await db.get(Page, page_id) is None
        remaining = (await db.execute(select(PageComponent).where(PageComponent.page_id == page_id))).all()
        assert remaining == []


class TestPublicPage:
    """Tests for the public username lookup"""

    async def test_visible_components_only(self, db, page, components):
        """Test hidden blocks are not published"""
        body = await PageService(db).get_public_page("Maria")

        assert body["username"] == "maria"
        assert [c["order_index"] for c in body["components"]] == [0, 1, 2]

    async def test_does_not_count_view(self, db, page):
        """Test the lookup leaves counters alone"""
        await PageService(db).get_public_page("maria")
        await db.refresh(page)

        assert page.views == 0

    async def test_inactive_page_falls_through(self, db, page):
        """Test inactive pages are not published"""
        page.is_active = False
        await db.commit()

        with pytest.raises(NotFoundError):
            await PageService(db).get_public_page("maria")

    async def test_legacy_store_fallback(self, db, legacy_store):
        """Test a legacy store is served when no page exists"""
        body = await PageService(db).get_public_page("maria-loja")

        assert body["legacy"] is True
        assert body["components"][0]["type"] == "video"

    async def test_page_with_legacy_products(self, db, page, components, legacy_store):
        """Test legacy products are appended to a page without products"""
        body = await PageService(db).get_public_page("maria")

        synthetic = [c for c in body["components"] if c.get("synthetic")]
        assert [c["id"] for c in synthetic] == [999, 1000, 1001]

    async def test_hidden_product_keeps_legacy_unpublished(self, db, page, components, legacy_store):
        """Test a hidden product component does not let legacy products through"""
        db.add(PageComponent(
            page_id=page.id,
            type=ComponentType.PRODUCT,
            order_index=4,
            config={"title": "Coming soon"},
            is_visible=False,
        ))
        await db.commit()

        body = await PageService(db).get_public_page("maria")

        assert not any(c.get("synthetic") for c in body["components"])
        assert len(body["components"]) == 3


class TestUsernameAndStats:
    """Tests for availability and landing stats"""

    async def test_check_username(self, db, page, legacy_store):
        """Test pages and legacy stores both claim names"""
        service = PageService(db)

        assert await service.check_username("MARIA") is False
        assert await service.check_username("maria-loja") is False
        assert await service.check_username("free-name") is True

    async def test_public_stats(self, db, owner):
        """Test page count and summed counters"""
        db.add_all([
            Page(user_id=owner.id, username="a", views=10, clicks=2),
            Page(user_id=owner.id, username="b", views=5, clicks=1),
        ])
        await db.commit()

        assert await PageService(db).public_stats() == {"pages": 2, "views": 15, "clicks": 3}

    async def test_public_stats_empty(self, db):
        """Test no pages at all"""
        assert await PageService(db).public_stats() == {"pages": 0, "views": 0, "clicks": 0}
