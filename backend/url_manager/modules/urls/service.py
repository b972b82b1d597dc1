"""URL module service layer.

``UrlService`` owns every write to the redirect graph: manual redirect
creation, slug renames and the admin operations. Cycle checking is part of
``create_redirect`` itself, so no caller can insert an unchecked edge.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.core.database import transactional
from url_manager.core.exceptions import NotFoundError
from url_manager.core.logging import get_logger
from url_manager.core.pagination import paginate_query
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.cycles import CycleDetector
from url_manager.modules.urls.exceptions import (
    InvalidRedirectCodeError,
    InvalidSlugError,
    InvalidStatusTransitionError,
    ManualRedirectRequiredError,
)
from url_manager.modules.urls.models import (
    REDIRECT_CODES,
    SENTINEL_OWNER_TYPE,
    UrlRecord,
    UrlStatus,
    UrlType,
    normalize_slug,
)
from url_manager.modules.urls.resolver import FinalResult, RedirectResolver, ResolutionResult
from url_manager.modules.urls.schemas import UrlUpdate
from url_manager.modules.urls.store import SlugStore

logger = get_logger(__name__)


class UrlService:
    """Service for managing URL records and redirects."""

    def __init__(self, db: AsyncSession, config: UrlManagerConfig | None = None) -> None:
        self.db = db
        self.config = config or UrlManagerConfig.from_settings()
        self.store = SlugStore(db)
        self.cycles = CycleDetector(self.store, self.config)
        self.resolver = RedirectResolver(self.store, self.config)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def resolve(self, slug: str) -> ResolutionResult:
        return await self.resolver.resolve(slug)

    async def resolve_fully(self, slug: str, max_depth: int | None = None) -> FinalResult:
        return await self.resolver.resolve_fully(slug, max_depth)

    async def get_by_id(self, record_id: UUID) -> UrlRecord:
        record = await self.store.get_by_id(record_id)
        if not record:
            raise NotFoundError("Url", record_id)
        return record

    async def list_urls(
        self,
        page: int = 1,
        page_size: int = 20,
        status: UrlStatus | None = None,
        url_type: UrlType | None = None,
        search: str | None = None,
    ) -> tuple[list[UrlRecord], int]:
        """List URL records, optionally filtered by status, type or slug prefix."""
        base_query = select(UrlRecord)

        if status is not None:
            base_query = base_query.where(UrlRecord.status == status.value)
        if url_type is not None:
            base_query = base_query.where(UrlRecord.type == url_type.value)
        if search:
            base_query = base_query.where(
                UrlRecord.slug.startswith(normalize_slug(search), autoescape=True)
            )

        return await paginate_query(
            self.db,
            base_query,
            page=page,
            page_size=page_size,
            order_by=[UrlRecord.slug],
        )

    # ------------------------------------------------------------------
    # Redirect graph writes
    # ------------------------------------------------------------------

    @transactional
    async def create_redirect(
        self, from_slug: str, to_slug: str, code: int | None = None
    ) -> UrlRecord:
        """Make ``from_slug`` redirect to ``to_slug``.

        An existing record at ``from_slug`` is converted in place; otherwise a
        sentinel-owned redirect record is inserted. Calling twice with the same
        arguments leaves a single record.
        """
        return await self._create_redirect(from_slug, to_slug, code)

    @transactional
    async def rename(self, record: UrlRecord, old_slug: str, new_slug: str) -> UrlRecord:
        """Move an owned record to ``new_slug`` and redirect ``old_slug`` to it.

        Both writes happen in one transaction: if creating the redirect fails
        the slug change is rolled back too.
        """
        return await self._rename(record, old_slug, new_slug)

    async def _create_redirect(
        self, from_slug: str, to_slug: str, code: int | None = None
    ) -> UrlRecord:
        code = self.config.default_redirect_code if code is None else code
        if code not in REDIRECT_CODES:
            raise InvalidRedirectCodeError(code)

        from_slug = normalize_slug(from_slug)
        to_slug = normalize_slug(to_slug)
        if not from_slug:
            raise InvalidSlugError(from_slug)
        if not to_slug:
            raise InvalidSlugError(to_slug)

        await self.cycles.check_edge(from_slug, to_slug)

        record = await self.store.get(from_slug)
        if record is not None:
            if (
                record.is_redirect
                and record.redirect_to == to_slug
                and record.redirect_code == code
            ):
                return record

            previous_status = record.status
            record.mark_redirect(to_slug, code)
            await self.store.flush(record)
            logger.info(
                "redirect_converted",
                slug=from_slug,
                redirect_to=to_slug,
                code=code,
                previous_status=previous_status,
            )
        else:
            record = UrlRecord(
                slug=from_slug,
                owner_type=SENTINEL_OWNER_TYPE,
                owner_id=None,
                type=UrlType.REDIRECT.value,
                status=UrlStatus.REDIRECT.value,
                redirect_to=to_slug,
                redirect_code=code,
            )
            record.touch()
            await self.store.upsert(record)
            logger.info("redirect_created", slug=from_slug, redirect_to=to_slug, code=code)

        await self._collapse_chains(from_slug, to_slug, keep=record)
        return record

    async def _rename(self, record: UrlRecord, old_slug: str, new_slug: str) -> UrlRecord:
        old_slug = normalize_slug(old_slug)
        new_slug = normalize_slug(new_slug)

        if old_slug == new_slug:
            return record
        if not new_slug:
            raise InvalidSlugError(new_slug)

        if record.slug != old_slug:
            logger.warning(
                "rename_slug_mismatch",
                record_id=str(record.id),
                stored_slug=record.slug,
                old_slug=old_slug,
            )

        # Rejects without touching anything
        await self.cycles.check_edge(old_slug, new_slug)

        # The owned record must leave old_slug before the redirect is written,
        # otherwise create_redirect would convert it in place.
        record.slug = new_slug
        record.touch()
        await self.store.flush(record)

        await self._create_redirect(old_slug, new_slug)

        logger.info(
            "slug_renamed",
            record_id=str(record.id),
            old_slug=old_slug,
            new_slug=new_slug,
        )
        return record

    async def _collapse_chains(self, from_slug: str, to_slug: str, keep: UrlRecord) -> None:
        """Point redirects that targeted ``from_slug`` straight at ``to_slug``.

        Once ``from_slug`` is itself a redirect nothing else may end on it, so
        repeated renames keep every historical slug one hop from the current one.
        """
        for redirect in await self.store.redirects_to(from_slug):
            if redirect.id == keep.id or redirect.slug == to_slug:
                continue
            redirect.redirect_to = to_slug
            redirect.touch()
            await self.store.flush(redirect)
            logger.info(
                "redirect_chain_collapsed",
                slug=redirect.slug,
                previous_target=from_slug,
                redirect_to=to_slug,
            )

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------

    @transactional
    async def update(self, record_id: UUID, data: UrlUpdate) -> UrlRecord:
        """Toggle Active/Inactive and edit SEO meta."""
        record = await self.get_by_id(record_id)
        update_data = data.model_dump(exclude_unset=True)

        if "status" in update_data and update_data["status"] is not None:
            requested = UrlStatus(update_data["status"])
            if record.is_redirect:
                raise InvalidStatusTransitionError(
                    record.slug, record.status, requested.value
                )
            if record.status != requested.value:
                record.status = requested.value
                record.touch()

        if "meta" in update_data:
            record.meta = update_data["meta"]

        await self.store.flush(record)
        await self.db.refresh(record)
        logger.info("url_updated", record_id=str(record.id), fields=list(update_data))
        return record

    @transactional
    async def delete_redirect(self, record_id: UUID) -> None:
        """Delete a manual redirect. Entity-owned records go with their entity."""
        record = await self.get_by_id(record_id)
        if not record.is_manual:
            raise ManualRedirectRequiredError(record.slug)

        await self.store.delete(record)
        logger.info("redirect_deleted", slug=record.slug, redirect_to=record.redirect_to)
