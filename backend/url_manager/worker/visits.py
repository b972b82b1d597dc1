"""Visit queue worker.

Usage:
    python -m url_manager.worker.visits [--once]

Pops "resolved" events from the Redis visit queue and applies them to the
``urls`` table. Counts may lag or undercount after a crash; resolution never
depends on them.
"""

import argparse
import asyncio
import signal

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from url_manager.config import settings
from url_manager.core.database import async_session_factory, close_db
from url_manager.core.logging import bind_context, get_logger, setup_logging, unbind_context
from url_manager.core.redis import close_redis, init_redis
from url_manager.modules.urls.visits import parse_visit_event, record_visit

logger = get_logger(__name__)


class VisitWorker:
    def __init__(
        self,
        redis: Redis,
        session_factory: async_sessionmaker[AsyncSession],
        queue_name: str,
        block_seconds: int = 5,
    ) -> None:
        self.redis = redis
        self.session_factory = session_factory
        self.queue_name = queue_name
        self.block_seconds = block_seconds
        self._stopping = asyncio.Event()

    def stop(self) -> None:
        self._stopping.set()

    async def handle(self, raw: str) -> bool:
        """Apply a single event. Returns True if a record was updated."""
        parsed = parse_visit_event(raw)
        if parsed is None:
            return False

        url_id, visited_at = parsed
        bind_context(url_id=str(url_id))
        try:
            async with self.session_factory() as db:
                try:
                    updated = await record_visit(db, url_id, visited_at)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise

            if not updated:
                logger.info("visit_url_unknown")
            return updated
        finally:
            unbind_context("url_id")

    async def drain(self) -> int:
        """Process everything currently queued without blocking."""
        processed = 0
        while True:
            raw = await self.redis.rpop(self.queue_name)
            if raw is None:
                return processed
            await self.handle(raw)
            processed += 1

    async def run(self) -> None:
        logger.info("visit_worker_started", queue=self.queue_name)
        while not self._stopping.is_set():
            item = await self.redis.brpop([self.queue_name], timeout=self.block_seconds)
            if item is None:
                continue
            _, raw = item
            try:
                await self.handle(raw)
            except Exception as e:
                # Event is dropped; visits are allowed to undercount
                logger.exception("visit_event_failed", error=str(e))
        logger.info("visit_worker_stopped")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Consume the URL visit queue")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Drain the queue and exit instead of blocking for new events",
    )
    args = parser.parse_args()

    setup_logging("visit-worker")
    redis = await init_redis()
    worker = VisitWorker(
        redis,
        async_session_factory,
        queue_name=settings.visit_queue_name,
        block_seconds=settings.visit_worker_block_seconds,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    try:
        if args.once:
            processed = await worker.drain()
            logger.info("visit_queue_drained", processed=processed)
        else:
            await worker.run()
    finally:
        await close_redis()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
