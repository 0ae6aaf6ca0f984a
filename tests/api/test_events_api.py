"""
API Tests - Analytics and Sales
"""
from datetime import timedelta

from bio_storefront.database.models import utcnow

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148"


def sale_body(page_id, **overrides):
    body = {
        "page_id": page_id,
        "product_id": "serum",
        "kit_id": "k3",
        "product_price": "219.90",
        "commission_amount": "70.00",
        "sale_date": (utcnow() - timedelta(hours=1)).isoformat(),
    }
    body.update(overrides)
    return body


class TestEventIntake:
    """Tests for public view and click intake"""

    async def test_view_then_summary(self, client, page, owner_headers):
        """Test recorded views show up in the owner's counts"""
        for _ in range(2):
            response = await client.post(
                "/api/v1/analytics/view",
                json={"pageId": page.id, "userAgent": IPHONE, "referrer": "https://instagram.com"},
            )
            assert response.json() == {"ok": True}

        summary = await client.get(f"/api/v1/analytics/{page.id}/summary", headers=owner_headers)

        assert summary.json() == {"views7d": 2, "clicks7d": 0}

    async def test_view_counter_on_page(self, client, page, owner_headers):
        """Test the denormalized views counter"""
        await client.post("/api/v1/analytics/view", json={"pageId": page.id})

        fetched = await client.get(f"/api/v1/pages/{page.id}", headers=owner_headers)

        assert fetched.json()["views"] == 1

    async def test_view_missing_page_id(self, client):
        """Test pageId is required"""
        response = await client.post("/api/v1/analytics/view", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "pageId is required"}

    async def test_view_unknown_page(self, client):
        """Test unknown page"""
        response = await client.post("/api/v1/analytics/view", json={"pageId": 987})

        assert response.status_code == 404

    async def test_click_requires_type(self, client, page):
        """Test componentType is required"""
        response = await client.post("/api/v1/analytics/click", json={"pageId": page.id})

        assert response.status_code == 400
        assert response.json() == {"error": "componentType is required"}

    async def test_click_report(self, client, page, owner_headers):
        """Test clicks feed the full report"""
        await client.post("/api/v1/analytics/view", json={"pageId": page.id, "userAgent": IPHONE})
        for label in ("Shop", "Shop", "Blog"):
            await client.post(
                "/api/v1/analytics/click",
                json={"pageId": page.id, "componentType": "link", "componentLabel": label},
            )

        response = await client.get(f"/api/v1/analytics/{page.id}?period=30d", headers=owner_headers)
        body = response.json()

        assert response.status_code == 200
        assert body["totalViews"] == 1
        assert body["totalClicks"] == 3
        assert body["ctr"] == 300.0
        assert body["period"] == "30d"
        assert len(body["chartData"]) == 30
        assert body["deviceStats"] == {"mobile": 1}
        assert [c["label"] for c in body["topComponents"]] == ["Shop", "Blog"]


class TestAnalyticsAccess:
    """Tests for report access rules"""

    async def test_requires_credential(self, client, page):
        """Test 401 without the header"""
        response = await client.get(f"/api/v1/analytics/{page.id}")

        assert response.status_code == 401

    async def test_non_owner(self, client, page, stranger_headers):
        """Test 403 for another user's page"""
        response = await client.get(f"/api/v1/analytics/{page.id}/summary", headers=stranger_headers)

        assert response.status_code == 403
        assert response.json() == {"error": "Access denied"}

    async def test_invalid_period(self, client, page, owner_headers):
        """Test periods outside 1d/7d/30d"""
        response = await client.get(f"/api/v1/analytics/{page.id}?period=90d", headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["allowed"] == ["1d", "7d", "30d"]


class TestSalesEndpoints:
    """Tests for /api/v1/sales"""

    async def test_create_resolves_legacy_labels(self, client, page, legacy_store, owner_headers):
        """Test labels come from the legacy product catalog"""
        response = await client.post("/api/v1/sales", json=sale_body(page.id), headers=owner_headers)
        body = response.json()

        assert response.status_code == 200
        assert body["product_title"] == "Vitamin C Serum"
        assert body["kit_label"] == "3 bottles"
        assert body["product_price"] == 219.9
        assert body["source"] == "manual"

    async def test_create_missing_fields(self, client, page, owner_headers):
        """Test body validation is a 400 with the offending fields"""
        response = await client.post(
            "/api/v1/sales",
            json={"page_id": page.id, "product_id": "serum"},
            headers=owner_headers,
        )
        body = response.json()

        assert response.status_code == 400
        assert body["error"] == "Invalid request"
        assert "kit_id" in body["fields"]

    async def test_create_non_owner(self, client, page, stranger_headers):
        """Test only the owner records sales"""
        response = await client.post("/api/v1/sales", json=sale_body(page.id), headers=stranger_headers)

        assert response.status_code == 403

    async def test_list_and_summary(self, client, page, owner_headers):
        """Test listing and rollup after two entries"""
        await client.post("/api/v1/sales", json=sale_body(page.id), headers=owner_headers)
        await client.post(
            "/api/v1/sales",
            json=sale_body(page.id, product_price="10.05", commission_amount="1.00"),
            headers=owner_headers,
        )

        listed = await client.get(f"/api/v1/sales/{page.id}", headers=owner_headers)
        summary = await client.get(f"/api/v1/sales/{page.id}/summary?period=7d", headers=owner_headers)
        body = summary.json()

        assert len(listed.json()) == 2
        assert body["totalSales"] == 2
        assert body["totalRevenue"] == 229.95
        assert body["totalCommission"] == 71.0
        assert len(body["salesByDay"]) == 7
        assert body["topProducts"] == [{"productTitle": "serum", "count": 2, "revenue": 229.95}]

    async def test_delete_sale(self, client, page, owner_headers):
        """Test owner delete removes the sale from listings"""
        created = await client.post("/api/v1/sales", json=sale_body(page.id), headers=owner_headers)

        deleted = await client.delete(f"/api/v1/sales/sale/{created.json()['id']}", headers=owner_headers)
        listed = await client.get(f"/api/v1/sales/{page.id}", headers=owner_headers)

        assert deleted.json() == {"ok": True}
        assert listed.json() == []

    async def test_delete_unknown_sale(self, client, owner_headers):
        """Test missing sale"""
        response = await client.delete("/api/v1/sales/sale/4040", headers=owner_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Sale not found"}
