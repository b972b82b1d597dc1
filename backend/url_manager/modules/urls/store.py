"""Slug store: persistence of URL records."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.core.logging import get_logger
from url_manager.modules.urls.exceptions import DuplicateOwnerError, DuplicateSlugError
from url_manager.modules.urls.models import UrlRecord, UrlStatus, normalize_slug
from url_manager.modules.urls.owners import EntityRef

logger = get_logger(__name__)


class SlugStore:
    """Point lookups and writes on the ``urls`` table.

    The store never commits; callers own the transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, slug: str) -> UrlRecord | None:
        stmt = select(UrlRecord).where(UrlRecord.slug == normalize_slug(slug))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, record_id: UUID) -> UrlRecord | None:
        return await self.db.get(UrlRecord, record_id)

    async def get_by_owner(self, ref: EntityRef) -> UrlRecord | None:
        stmt = select(UrlRecord).where(
            UrlRecord.owner_type == ref.owner_type,
            UrlRecord.owner_id == ref.owner_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, record: UrlRecord) -> UrlRecord:
        """Insert a new record or write pending changes of a loaded one."""
        record.slug = normalize_slug(record.slug)
        if record.redirect_to is not None:
            record.redirect_to = normalize_slug(record.redirect_to)
        self.db.add(record)
        await self.flush(record)
        return record

    async def flush(self, record: UrlRecord) -> None:
        """Flush pending changes, translating unique violations."""
        # A failed flush expires the instance, so read its keys up front
        slug, owner_type, owner_id = record.slug, record.owner_type, record.owner_id
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning("url_integrity_error", slug=slug, error=str(e.orig))
            if _is_owner_violation(e):
                raise DuplicateOwnerError(owner_type, str(owner_id)) from e
            raise DuplicateSlugError(slug) from e

    async def delete(self, record: UrlRecord) -> None:
        await self.db.delete(record)
        await self.db.flush()

    async def delete_by_owner(self, ref: EntityRef) -> int:
        """Delete the record owned by ``ref``. Redirects to its slugs are kept."""
        stmt = delete(UrlRecord).where(
            UrlRecord.owner_type == ref.owner_type,
            UrlRecord.owner_id == ref.owner_id,
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def redirects_to(self, slug: str) -> list[UrlRecord]:
        """Redirect records whose target is ``slug``."""
        stmt = select(UrlRecord).where(
            UrlRecord.status == UrlStatus.REDIRECT.value,
            UrlRecord.redirect_to == normalize_slug(slug),
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def redirect_edges(self) -> dict[str, str | None]:
        """Every redirect edge as ``{slug: redirect_to}``."""
        stmt = (
            select(UrlRecord.slug, UrlRecord.redirect_to)
            .where(UrlRecord.status == UrlStatus.REDIRECT.value)
            .order_by(UrlRecord.slug)
        )
        result = await self.db.execute(stmt)
        return {slug: target for slug, target in result.all()}

    async def existing_slugs(self, slugs: list[str]) -> set[str]:
        if not slugs:
            return set()
        stmt = select(UrlRecord.slug).where(UrlRecord.slug.in_(slugs))
        result = await self.db.execute(stmt)
        return set(result.scalars().all())


OWNER_CONSTRAINT = "uq_urls_owner"


def _constraint_name(error: IntegrityError) -> str | None:
    """Name of the violated constraint, when the driver reports it."""
    # asyncpg raises through the SQLAlchemy adapter, psycopg exposes diag
    cause = getattr(error.orig, "__cause__", None)
    name = getattr(cause, "constraint_name", None)
    if name is None:
        diag = getattr(error.orig, "diag", None)
        name = getattr(diag, "constraint_name", None)
    return name


def _is_owner_violation(error: IntegrityError) -> bool:
    name = _constraint_name(error)
    if name is not None:
        return name == OWNER_CONSTRAINT

    # The message may echo the offending slug, so match only the
    # constraint part: PostgreSQL quotes the name, SQLite lists the columns.
    message = str(error.orig).lower()
    return (
        f'constraint "{OWNER_CONSTRAINT}"' in message
        or "unique constraint failed: urls.owner_type" in message
    )
