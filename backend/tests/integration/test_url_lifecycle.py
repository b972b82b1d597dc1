"""Integration tests for entity lifecycle hooks."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixtures.factories import FakeEntityFactory
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.exceptions import DuplicateSlugError
from url_manager.modules.urls.lifecycle import UrlLifecycle
from url_manager.modules.urls.models import EntityKind, UrlRecord, UrlStatus, UrlType
from url_manager.modules.urls.resolver import Active, NotFound, NotFoundReason, Redirect


class TestUrlLifecycle:
    """Tests for UrlLifecycle hooks."""

    @pytest.fixture
    def lifecycle(self, db_session: AsyncSession, url_config: UrlManagerConfig) -> UrlLifecycle:
        return UrlLifecycle(db_session, url_config)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_created(self, lifecycle: UrlLifecycle) -> None:
        entity = FakeEntityFactory(kind=EntityKind.CATEGORY, path="/shoes/")

        record = await lifecycle.on_entity_created(entity)

        assert record.slug == "shoes"
        assert record.owner_type == "category"
        assert record.owner_id == entity.id
        assert record.type == UrlType.CATEGORY.value
        assert record.status == UrlStatus.ACTIVE.value

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_created_inactive(self, lifecycle: UrlLifecycle) -> None:
        entity = FakeEntityFactory(is_active=False)

        record = await lifecycle.on_entity_created(entity)

        assert record.status == UrlStatus.INACTIVE.value
        result = await lifecycle.urls.resolve(record.slug)
        assert isinstance(result, NotFound)
        assert result.reason == NotFoundReason.INACTIVE

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_created_twice_keeps_one_record(
        self, db_session: AsyncSession, lifecycle: UrlLifecycle
    ) -> None:
        entity = FakeEntityFactory(path="bag")

        first = await lifecycle.on_entity_created(entity)
        second = await lifecycle.on_entity_created(entity)

        assert first.id == second.id
        slugs = (await db_session.execute(select(UrlRecord.slug))).scalars().all()
        assert slugs == ["bag"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_renamed(self, lifecycle: UrlLifecycle) -> None:
        entity = FakeEntityFactory(path="old-name")
        record = await lifecycle.on_entity_created(entity)

        entity.path = "new-name"
        renamed = await lifecycle.on_entity_renamed(entity)

        assert renamed is not None
        assert renamed.id == record.id
        assert renamed.slug == "new-name"

        hop = await lifecycle.urls.resolve("old-name")
        assert isinstance(hop, Redirect)
        assert hop.target_slug == "new-name"

        final = await lifecycle.urls.resolve_fully("old-name")
        assert isinstance(final, Active)
        assert final.record.id == record.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_renamed_onto_taken_slug(
        self, db_session: AsyncSession, lifecycle: UrlLifecycle
    ) -> None:
        entity = FakeEntityFactory(path="owner-guide")
        await lifecycle.on_entity_created(entity)
        await lifecycle.on_entity_created(FakeEntityFactory(path="owner-manual"))

        entity.path = "owner-manual"
        with pytest.raises(DuplicateSlugError):
            await lifecycle.on_entity_renamed(entity)

        result = await db_session.execute(select(UrlRecord.slug, UrlRecord.status))
        assert dict(result.all()) == {
            "owner-guide": UrlStatus.ACTIVE.value,
            "owner-manual": UrlStatus.ACTIVE.value,
        }

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_renamed_without_record(self, lifecycle: UrlLifecycle) -> None:
        assert await lifecycle.on_entity_renamed(FakeEntityFactory()) is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_status_changed(self, lifecycle: UrlLifecycle) -> None:
        entity = FakeEntityFactory()
        await lifecycle.on_entity_created(entity)

        entity.is_active = False
        record = await lifecycle.on_entity_status_changed(entity)
        assert record is not None
        assert record.status == UrlStatus.INACTIVE.value

        entity.is_active = True
        record = await lifecycle.on_entity_status_changed(entity)
        assert record is not None
        assert record.status == UrlStatus.ACTIVE.value

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_status_change_leaves_redirect(self, lifecycle: UrlLifecycle) -> None:
        """A record an admin turned into a redirect is not reactivated."""
        entity = FakeEntityFactory(path="retired")
        await lifecycle.on_entity_created(entity)
        await lifecycle.urls.create_redirect("retired", "catalog")

        entity.is_active = False
        record = await lifecycle.on_entity_status_changed(entity)

        assert record is not None
        assert record.status == UrlStatus.REDIRECT.value
        assert record.redirect_to == "catalog"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_deleted_keeps_inbound_redirects(
        self, db_session: AsyncSession, lifecycle: UrlLifecycle
    ) -> None:
        entity = FakeEntityFactory(path="v1")
        await lifecycle.on_entity_created(entity)
        entity.path = "v2"
        await lifecycle.on_entity_renamed(entity)

        deleted = await lifecycle.on_entity_deleted(entity)

        assert deleted == 1
        slugs = (await db_session.execute(select(UrlRecord.slug))).scalars().all()
        assert slugs == ["v1"]

        final = await lifecycle.urls.resolve_fully("v1")
        assert final == NotFound(slug="v2", reason=NotFoundReason.DANGLING)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_deleted_without_record(self, lifecycle: UrlLifecycle) -> None:
        assert await lifecycle.on_entity_deleted(FakeEntityFactory()) == 0
