"""Unit tests for SlugStore write error translation."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from fixtures.factories import UrlRecordFactory
from url_manager.modules.urls.exceptions import DuplicateOwnerError, DuplicateSlugError
from url_manager.modules.urls.store import SlugStore


def integrity_error(message: str, constraint_name: str | None = None) -> IntegrityError:
    orig = Exception(message)
    if constraint_name is not None:
        cause = Exception(message)
        cause.constraint_name = constraint_name
        orig.__cause__ = cause
    return IntegrityError("INSERT INTO urls ...", {}, orig)


class TestSlugStoreFlush:
    """Tests for SlugStore.flush."""

    @pytest.fixture
    def mock_db(self) -> AsyncMock:
        db = AsyncMock()
        db.add = MagicMock()
        return db

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_slug_containing_owner_is_a_slug_conflict(self, mock_db: AsyncMock) -> None:
        mock_db.flush.side_effect = integrity_error(
            'duplicate key value violates unique constraint "uq_urls_slug"\n'
            "DETAIL:  Key (slug)=(guides/owner-manual) already exists."
        )
        store = SlugStore(mock_db)

        with pytest.raises(DuplicateSlugError) as exc_info:
            await store.upsert(UrlRecordFactory(slug="guides/owner-manual"))

        assert exc_info.value.slug == "guides/owner-manual"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_owner_constraint_from_driver(self, mock_db: AsyncMock) -> None:
        mock_db.flush.side_effect = integrity_error(
            "duplicate key value violates unique constraint",
            constraint_name="uq_urls_owner",
        )
        store = SlugStore(mock_db)

        with pytest.raises(DuplicateOwnerError):
            await store.upsert(UrlRecordFactory(owner_type="product", owner_id="7"))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_slug_constraint_from_driver(self, mock_db: AsyncMock) -> None:
        mock_db.flush.side_effect = integrity_error(
            "Key (slug)=(owner) already exists", constraint_name="uq_urls_slug"
        )
        store = SlugStore(mock_db)

        with pytest.raises(DuplicateSlugError):
            await store.upsert(UrlRecordFactory(slug="owner"))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sqlite_owner_message(self, mock_db: AsyncMock) -> None:
        mock_db.flush.side_effect = integrity_error(
            "UNIQUE constraint failed: urls.owner_type, urls.owner_id"
        )
        store = SlugStore(mock_db)

        with pytest.raises(DuplicateOwnerError):
            await store.upsert(UrlRecordFactory())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_keys_read_before_flush(self, mock_db: AsyncMock) -> None:
        """The error carries the slug even when the record is unreadable afterwards."""
        record = UrlRecordFactory(slug="taken")

        async def fail_and_expire() -> None:
            record.slug = None
            raise integrity_error("UNIQUE constraint failed: urls.slug")

        mock_db.flush.side_effect = fail_and_expire
        store = SlugStore(mock_db)

        with pytest.raises(DuplicateSlugError) as exc_info:
            await store.flush(record)

        assert exc_info.value.slug == "taken"
