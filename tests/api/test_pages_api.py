"""
API Tests - Pages and Components
"""


class TestPagesEndpoints:
    """Tests for /api/v1/pages"""

    async def test_create_requires_credential(self, client):
        """Test 401 without the auth header"""
        response = await client.post("/api/v1/pages", json={"username": "x"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    async def test_create_and_list(self, client, owner_headers):
        """Test created pages are listed for their owner"""
        created = await client.post(
            "/api/v1/pages",
            json={"username": "Shop", "profile_name": "My Shop"},
            headers=owner_headers,
        )
        listed = await client.get("/api/v1/pages", headers=owner_headers)

        assert created.status_code == 200
        assert created.json()["username"] == "shop"
        assert [p["username"] for p in listed.json()] == ["shop"]

    async def test_create_needs_email_for_new_user(self, client):
        """Test USER_NOT_FOUND code when the identity is new"""
        response = await client.post("/api/v1/pages", json={"username": "x"}, headers={"X-User-Id": "brand-new"})

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    async def test_duplicate_username(self, client, page, owner_headers):
        """Test taken username is a validation error"""
        response = await client.post("/api/v1/pages", json={"username": "MARIA"}, headers=owner_headers)

        assert response.status_code == 400
        assert "error" in response.json()

    async def test_list_for_unknown_user_is_empty(self, client):
        """Test an identity without a user row has no pages"""
        response = await client.get("/api/v1/pages", headers={"X-User-Id": "nobody"})

        assert response.status_code == 200
        assert response.json() == []

    async def test_check_username(self, client, page):
        """Test availability flag"""
        taken = await client.get("/api/v1/pages/check-username/Maria")
        free = await client.get("/api/v1/pages/check-username/someone-else")

        assert taken.json() == {"available": False}
        assert free.json() == {"available": True}

    async def test_public_page(self, client, page, components):
        """Test public lookup returns visible components"""
        response = await client.get("/api/v1/pages/username/maria")

        assert response.status_code == 200
        assert len(response.json()["components"]) == 3

    async def test_public_page_not_found(self, client):
        """Test unknown username"""
        response = await client.get("/api/v1/pages/username/ghost")

        assert response.status_code == 404
        assert response.json() == {"error": "Page not found"}

    async def test_get_page_foreign_user(self, client, page, stranger_headers):
        """Test 403 for another identified user"""
        response = await client.get(f"/api/v1/pages/{page.id}", headers=stranger_headers)

        assert response.status_code == 403
        assert response.json() == {"error": "Access denied"}

    async def test_patch_page(self, client, page, owner_headers):
        """Test profile update"""
        response = await client.patch(
            f"/api/v1/pages/{page.id}",
            json={"profile_bio": "Skincare"},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["profile_bio"] == "Skincare"

    async def test_delete_page(self, client, page, owner_headers):
        """Test owner delete"""
        deleted = await client.delete(f"/api/v1/pages/{page.id}", headers=owner_headers)
        fetched = await client.get(f"/api/v1/pages/{page.id}")

        assert deleted.json() == {"success": True}
        assert fetched.status_code == 404

    async def test_public_stats(self, client, page):
        """Test landing stats"""
        response = await client.get("/api/v1/public/stats")

        assert response.json() == {"pages": 1, "views": 0, "clicks": 0}


class TestComponentEndpoints:
    """Tests for component routes"""

    async def test_add_and_list(self, client, page, owner_headers):
        """Test add then list in order"""
        first = await client.post(
            f"/api/v1/pages/{page.id}/components",
            json={"type": "text", "config": {"content": "Hi"}},
            headers=owner_headers,
        )
        second = await client.post(
            f"/api/v1/pages/{page.id}/components",
            json={"type": "button", "config": {"text": "Buy"}},
            headers=owner_headers,
        )
        listed = await client.get(f"/api/v1/pages/{page.id}/components", headers=owner_headers)

        assert first.json()["order_index"] == 0
        assert second.json()["order_index"] == 1
        assert [c["type"] for c in listed.json()] == ["text", "button"]

    async def test_add_unknown_type(self, client, page, owner_headers):
        """Test invalid type is a 400"""
        response = await client.post(
            f"/api/v1/pages/{page.id}/components",
            json={"type": "marquee"},
            headers=owner_headers,
        )

        assert response.status_code == 400

    async def test_add_to_foreign_page(self, client, page, stranger_headers):
        """Test foreign page looks missing"""
        response = await client.post(
            f"/api/v1/pages/{page.id}/components",
            json={"type": "text"},
            headers=stranger_headers,
        )

        assert response.status_code == 404

    async def test_list_foreign_page_with_credential(self, client, page, components, stranger_headers):
        """Test identified non-owner is refused"""
        response = await client.get(f"/api/v1/pages/{page.id}/components", headers=stranger_headers)

        assert response.status_code == 403

    async def test_list_includes_legacy_products(self, client, page, components, legacy_store):
        """Test synthetic components are flagged"""
        response = await client.get(f"/api/v1/pages/{page.id}/components")

        synthetic = [c for c in response.json() if c["synthetic"]]
        assert [c["id"] for c in synthetic] == [999, 1000, 1001]

    async def test_reorder(self, client, page, components, owner_headers):
        """Test reorder then list"""
        a, b, c, _ = components
        response = await client.post(
            f"/api/v1/pages/{page.id}/reorder",
            json={"componentIds": [c.id, b.id, a.id]},
            headers=owner_headers,
        )
        listed = await client.get(f"/api/v1/pages/{page.id}/components", headers=owner_headers)

        assert response.json() == {"success": True}
        assert [comp["id"] for comp in listed.json()][:3] == [c.id, b.id, a.id]

    async def test_reorder_requires_array(self, client, page, owner_headers):
        """Test componentIds must be a list"""
        response = await client.post(
            f"/api/v1/pages/{page.id}/reorder",
            json={"componentIds": "1,2"},
            headers=owner_headers,
        )

        assert response.status_code == 400

    async def test_patch_component(self, client, components, owner_headers):
        """Test hiding a component"""
        target = components[0]
        response = await client.patch(
            f"/api/v1/components/{target.id}",
            json={"is_visible": False},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_visible"] is False

    async def test_patch_component_unknown_field(self, client, components, owner_headers):
        """Test unknown keys are rejected"""
        response = await client.patch(
            f"/api/v1/components/{components[0].id}",
            json={"page_id": 99},
            headers=owner_headers,
        )

        assert response.status_code == 400
        assert response.json()["fields"] == ["page_id"]

    async def test_delete_component_non_owner(self, client, components, stranger_headers):
        """Test 403 for non-owners"""
        response = await client.delete(f"/api/v1/components/{components[0].id}", headers=stranger_headers)

        assert response.status_code == 403

    async def test_delete_component(self, client, components, owner_headers):
        """Test owner delete"""
        response = await client.delete(f"/api/v1/components/{components[0].id}", headers=owner_headers)

        assert response.json() == {"success": True}
