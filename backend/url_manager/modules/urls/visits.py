"""Visit events.

Resolution pushes a "resolved" event onto a Redis list; the visit worker pops
events and bumps the counters. Dispatch is fire-and-forget: a failure is
logged and never reaches the request.
"""

import json
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.core.logging import get_logger
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.models import UrlRecord
from url_manager.modules.urls.owners import EntityRef, owner_of

logger = get_logger(__name__)


def build_visit_event(record: UrlRecord, entity_ref: EntityRef | None = None) -> dict[str, Any]:
    ref = entity_ref if entity_ref is not None else owner_of(record)
    return {
        "url_id": str(record.id),
        "slug": record.slug,
        "owner_type": ref.owner_type,
        "owner_id": ref.owner_id,
        "visited_at": datetime.now(UTC).isoformat(),
    }


class VisitDispatcher:
    """Pushes resolved events to the visit queue."""

    def __init__(self, redis: Redis | None, config: UrlManagerConfig) -> None:
        self.redis = redis
        self.config = config

    async def dispatch(self, record: UrlRecord, entity_ref: EntityRef | None = None) -> bool:
        """Queue a visit for ``record``. Returns False when nothing was queued."""
        if not self.config.track_visits or self.redis is None:
            return False

        event = build_visit_event(record, entity_ref)
        try:
            await self.redis.lpush(self.config.visit_queue_name, json.dumps(event))
        except Exception as e:
            logger.warning("visit_dispatch_failed", slug=record.slug, error=str(e))
            return False
        return True


async def record_visit(db: AsyncSession, url_id: UUID, visited_at: datetime | None = None) -> bool:
    """Apply one visit with a single UPDATE. Unknown ids are ignored."""
    stmt = (
        update(UrlRecord)
        .where(UrlRecord.id == url_id)
        .values(
            visits=UrlRecord.visits + 1,
            last_visited_at=visited_at or datetime.now(UTC),
        )
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return (result.rowcount or 0) > 0


def parse_visit_event(raw: str) -> tuple[UUID, datetime | None] | None:
    """Decode a queued event. Malformed payloads return None."""
    try:
        payload = json.loads(raw)
        url_id = UUID(payload["url_id"])
        visited_at = payload.get("visited_at")
        return url_id, datetime.fromisoformat(visited_at) if visited_at else None
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("visit_event_malformed", payload=raw[:200], error=str(e))
        return None
