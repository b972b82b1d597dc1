"""Tests for the request logging middleware."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fixtures.factories import RedirectRecordFactory

MIDDLEWARE_MODULE = "url_manager.middleware.request_logging"


@pytest.fixture
def mock_logger(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    logger = MagicMock()
    monkeypatch.setattr(f"{MIDDLEWARE_MODULE}.logger", logger)
    return logger


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware."""

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-ID": "edge-123"})

        assert response.headers["X-Request-ID"] == "edge-123"
        assert "X-Process-Time" in response.headers

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 36

    @pytest.mark.asyncio
    async def test_redirect_location_logged(
        self, client: AsyncClient, db_session: AsyncSession, mock_logger: MagicMock
    ) -> None:
        db_session.add(RedirectRecordFactory(slug="old", redirect_to="new"))
        await db_session.commit()

        await client.get("/old")

        mock_logger.info.assert_any_call(
            "request_completed",
            status_code=301,
            process_time_ms=pytest.approx(0, abs=60_000),
            location="/new",
        )

    @pytest.mark.asyncio
    async def test_health_probes_logged_at_debug(
        self, client: AsyncClient, mock_logger: MagicMock
    ) -> None:
        await client.get("/health")

        mock_logger.info.assert_not_called()
        events = [c.args[0] for c in mock_logger.debug.call_args_list]
        assert events == ["request_started", "request_completed"]
