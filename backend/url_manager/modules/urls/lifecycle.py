"""Entity lifecycle hooks.

The entity layer calls these explicitly when an entity is created, renamed,
toggled or deleted; there is no implicit event bus.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.core.database import transactional
from url_manager.core.logging import get_logger
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.models import UrlRecord, UrlStatus, normalize_slug
from url_manager.modules.urls.owners import UrlOwner
from url_manager.modules.urls.service import UrlService

logger = get_logger(__name__)


def _status_for(entity: UrlOwner) -> str:
    if entity.is_active_for_url():
        return UrlStatus.ACTIVE.value
    return UrlStatus.INACTIVE.value


class UrlLifecycle:
    """Keeps an entity's URL record in step with the entity."""

    def __init__(self, db: AsyncSession, config: UrlManagerConfig | None = None) -> None:
        self.db = db
        self.urls = UrlService(db, config)
        self.store = self.urls.store

    @transactional
    async def on_entity_created(self, entity: UrlOwner) -> UrlRecord:
        """Create the entity's record, or update it if one already exists."""
        ref = entity.owner_ref()
        slug = normalize_slug(entity.canonical_path())

        record = await self.store.get_by_owner(ref)
        if record is not None:
            if record.slug != slug:
                await self.urls._rename(record, record.slug, slug)
            if not record.is_redirect:
                record.status = _status_for(entity)
            record.touch()
            await self.store.flush(record)
            return record

        record = UrlRecord(
            slug=slug,
            owner_type=ref.owner_type,
            owner_id=ref.owner_id,
            type=ref.kind.url_type.value,
            status=_status_for(entity),
        )
        record.touch()
        await self.store.upsert(record)
        logger.info(
            "url_created",
            slug=slug,
            owner_type=ref.owner_type,
            owner_id=ref.owner_id,
        )
        return record

    @transactional
    async def on_entity_renamed(self, entity: UrlOwner) -> UrlRecord | None:
        """Follow a change of the entity's canonical path."""
        ref = entity.owner_ref()
        record = await self.store.get_by_owner(ref)
        if record is None:
            logger.warning(
                "url_missing_for_entity",
                owner_type=ref.owner_type,
                owner_id=ref.owner_id,
            )
            return None

        new_slug = normalize_slug(entity.canonical_path())
        if record.slug != new_slug:
            await self.urls._rename(record, record.slug, new_slug)
        else:
            record.touch()
            await self.store.flush(record)
        return record

    @transactional
    async def on_entity_status_changed(self, entity: UrlOwner) -> UrlRecord | None:
        """Toggle Active/Inactive. Redirect records are left alone."""
        ref = entity.owner_ref()
        record = await self.store.get_by_owner(ref)
        if record is None:
            return None

        if record.is_redirect:
            logger.info("url_status_change_skipped", slug=record.slug, status=record.status)
            return record

        status = _status_for(entity)
        if record.status != status:
            record.status = status
            record.touch()
            await self.store.flush(record)
            logger.info("url_status_changed", slug=record.slug, status=status)
        return record

    @transactional
    async def on_entity_deleted(self, entity: UrlOwner) -> int:
        """Remove the entity's record. Redirects to its old slugs stay behind."""
        ref = entity.owner_ref()
        deleted = await self.store.delete_by_owner(ref)
        logger.info(
            "url_deleted",
            owner_type=ref.owner_type,
            owner_id=ref.owner_id,
            deleted=deleted,
        )
        return deleted
