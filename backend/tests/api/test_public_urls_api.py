"""API tests for the public front controller."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fixtures.factories import RedirectRecordFactory, UrlRecordFactory
from url_manager.modules.urls.models import UrlStatus
from url_manager.modules.urls.visits import VisitDispatcher


@pytest.fixture
async def pages(db_session: AsyncSession) -> None:
    db_session.add_all(
        [
            UrlRecordFactory(
                slug="shoes/red",
                owner_type="product",
                owner_id="42",
                meta={"title": "Red shoes"},
            ),
            UrlRecordFactory(slug="hidden", status=UrlStatus.INACTIVE.value),
            RedirectRecordFactory(slug="red-shoes", redirect_to="shoes/red", redirect_code=301),
            RedirectRecordFactory(slug="sale", redirect_to="shoes/red", redirect_code=307),
        ]
    )
    await db_session.commit()


class TestResolveSlug:
    """Tests for GET /{slug}."""

    @pytest.mark.asyncio
    async def test_active_page(
        self, client: AsyncClient, visit_dispatcher: VisitDispatcher, pages: None
    ) -> None:
        response = await client.get("/shoes/red")

        assert response.status_code == 200
        data = response.json()
        assert data["slug"] == "shoes/red"
        assert data["owner_type"] == "product"
        assert data["owner_id"] == "42"
        assert data["meta"]["title"] == "Red shoes"
        assert data["meta"]["og_type"] == "website"

        visit_dispatcher.redis.lpush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redirect_single_hop(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/red-shoes")

        assert response.status_code == 301
        assert response.headers["location"] == "/shoes/red"

    @pytest.mark.asyncio
    async def test_redirect_keeps_query_string(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/sale?utm_source=mail&ref=1")

        assert response.status_code == 307
        assert response.headers["location"] == "/shoes/red?utm_source=mail&ref=1"

    @pytest.mark.asyncio
    async def test_redirect_is_not_counted(
        self, client: AsyncClient, visit_dispatcher: VisitDispatcher, pages: None
    ) -> None:
        await client.get("/red-shoes")

        visit_dispatcher.redis.lpush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/does-not-exist")

        assert response.status_code == 404
        data = response.json()
        assert data["type"].endswith("/url_not_found")
        assert data["reason"] == "missing"
        assert data["instance"] == "/does-not-exist"

    @pytest.mark.asyncio
    async def test_inactive(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/hidden")

        assert response.status_code == 404
        assert response.json()["reason"] == "inactive"

    @pytest.mark.asyncio
    async def test_dispatch_failure_does_not_fail_request(
        self, client: AsyncClient, visit_dispatcher: VisitDispatcher, pages: None
    ) -> None:
        visit_dispatcher.redis.lpush.side_effect = ConnectionError("redis down")

        response = await client.get("/shoes/red")

        assert response.status_code == 200


class TestSitemap:
    """Tests for sitemap endpoints."""

    @pytest.mark.asyncio
    async def test_sitemap(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/sitemap.xml")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert "<loc>http://test/</loc>" in response.text
        assert "<loc>http://test/shoes/red</loc>" in response.text
        assert "red-shoes" not in response.text
        assert "hidden" not in response.text

    @pytest.mark.asyncio
    async def test_sitemap_page_out_of_range(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/sitemap-2.xml")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_sitemap_first_page(self, client: AsyncClient, pages: None) -> None:
        response = await client.get("/sitemap-1.xml")

        assert response.status_code == 200
        assert "<urlset" in response.text
