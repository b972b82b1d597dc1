"""Create URL records for entities that do not have one yet.

Usage:
    python -m url_manager.scripts.generate_urls entities.jsonl [--include-inactive]

Each input line is a JSON object such as
``{"kind": "product", "id": "42", "path": "shoes/red", "is_active": true}``.
Entities that already own a record are left alone, as are entities whose slug
is held by another record. Run it after importing content in bulk or when
adding URLs to an existing catalogue.
"""

import asyncio
import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.core.database import get_db_context
from url_manager.core.logging import get_logger, setup_logging
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.exceptions import DuplicateOwnerError, DuplicateSlugError
from url_manager.modules.urls.lifecycle import UrlLifecycle
from url_manager.modules.urls.models import EntityKind, normalize_slug
from url_manager.modules.urls.owners import EntityRef, UrlOwner

logger = get_logger(__name__)


class EntityRow(BaseModel):
    """One entity read from the input file."""

    kind: EntityKind
    id: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    is_active: bool = True

    def owner_ref(self) -> EntityRef:
        return EntityRef(kind=self.kind, id=self.id)

    def canonical_path(self) -> str:
        return self.path

    def is_active_for_url(self) -> bool:
        return self.is_active


@dataclass
class BackfillReport:
    created: int = 0
    existing: int = 0
    inactive: int = 0
    conflicts: dict[str, str] = field(default_factory=dict)


async def backfill_urls(
    db: AsyncSession,
    entities: Iterable[UrlOwner],
    config: UrlManagerConfig | None = None,
    include_inactive: bool = False,
) -> BackfillReport:
    """Create a record for every entity without one.

    Each record is committed on its own, so one conflicting slug does not
    undo the rest of the run.
    """
    lifecycle = UrlLifecycle(db, config)
    report = BackfillReport()

    for entity in entities:
        ref = entity.owner_ref()
        label = f"{ref.owner_type}:{ref.owner_id}"

        if not include_inactive and not entity.is_active_for_url():
            report.inactive += 1
            continue
        if await lifecycle.store.get_by_owner(ref) is not None:
            report.existing += 1
            continue

        slug = normalize_slug(entity.canonical_path())
        holder = await lifecycle.store.get(slug)
        if holder is not None:
            logger.warning("url_backfill_slug_taken", slug=slug, owner=label)
            report.conflicts[label] = slug
            continue

        try:
            await lifecycle.on_entity_created(entity)
        except (DuplicateSlugError, DuplicateOwnerError) as e:
            logger.warning("url_backfill_conflict", slug=slug, owner=label, error=e.message)
            report.conflicts[label] = slug
            continue
        report.created += 1

    logger.info(
        "url_backfill_finished",
        created=report.created,
        existing=report.existing,
        inactive=report.inactive,
        conflicts=len(report.conflicts),
    )
    return report


def read_entities(path: Path) -> list[EntityRow]:
    rows = []
    with path.open(encoding="utf-8") as f:
        for line in f:
            if line.strip():
                rows.append(EntityRow.model_validate_json(line))
    return rows


async def main():
    """Main function."""
    import argparse

    parser = argparse.ArgumentParser(description="Create missing URL records")
    parser.add_argument("input", type=Path, help="JSON lines file of entities")
    parser.add_argument(
        "--include-inactive",
        action="store_true",
        help="Also create (inactive) records for hidden entities",
    )
    args = parser.parse_args()

    setup_logging("generate-urls")
    try:
        entities = read_entities(args.input)
        async with get_db_context() as db:
            report = await backfill_urls(
                db,
                entities,
                UrlManagerConfig.from_settings(),
                include_inactive=args.include_inactive,
            )
    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    print(f"✅ Created {report.created} URL records")
    print(f"ℹ️  {report.existing} entities already had one, {report.inactive} inactive skipped")
    for owner, slug in report.conflicts.items():
        print(f"⚠️  {owner}: slug '{slug}' is taken by another record")


if __name__ == "__main__":
    asyncio.run(main())
