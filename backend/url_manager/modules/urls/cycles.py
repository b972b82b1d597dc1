"""Cycle detection for proposed redirect edges.

Every slug redirects to at most one target, so the redirect graph is a set of
linked lists. Checking an edge ``from -> to`` is a bounded walk forward from
``to``: reaching ``from`` means the edge would close a loop.
"""

from dataclasses import dataclass, field

from url_manager.core.logging import get_logger
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.exceptions import (
    CircularRedirectError,
    RedirectChainTooLongError,
)
from url_manager.modules.urls.models import normalize_slug
from url_manager.modules.urls.store import SlugStore

logger = get_logger(__name__)


@dataclass
class EdgeWalk:
    """Outcome of walking forward from a proposed redirect target."""

    chain: list[str] = field(default_factory=list)
    cycle: bool = False
    exhausted: bool = False


class CycleDetector:
    def __init__(self, store: SlugStore, config: UrlManagerConfig) -> None:
        self.store = store
        self.config = config

    async def walk(self, from_slug: str, to_slug: str) -> EdgeWalk:
        """Follow existing redirects from ``to_slug``.

        The chain starts at ``to_slug``; when the walk reaches ``from_slug`` it
        is appended and ``cycle`` is set. ``exhausted`` is set once the target
        chain alone reaches ``max_redirect_depth`` hops, since ``from_slug``
        could then no longer be resolved within the limit.
        """
        from_slug = normalize_slug(from_slug)
        to_slug = normalize_slug(to_slug)

        if from_slug == to_slug:
            return EdgeWalk(chain=[from_slug], cycle=True)

        walk = EdgeWalk(chain=[to_slug])
        visited = {to_slug}
        current = to_slug
        hops = 0

        while True:
            record = await self.store.get(current)
            if record is None or not record.is_redirect or not record.redirect_to:
                return walk

            next_slug = normalize_slug(record.redirect_to)
            if next_slug == from_slug:
                walk.chain.append(from_slug)
                walk.cycle = True
                return walk

            if next_slug in visited:
                # Existing loop that does not involve from_slug
                logger.warning(
                    "redirect_cycle_preexisting",
                    from_slug=from_slug,
                    to_slug=to_slug,
                    chain=[*walk.chain, next_slug],
                )
                walk.exhausted = True
                return walk

            visited.add(next_slug)
            walk.chain.append(next_slug)
            current = next_slug
            hops += 1

            if hops >= self.config.max_redirect_depth:
                walk.exhausted = True
                return walk

    async def would_create_cycle(self, from_slug: str, to_slug: str) -> bool:
        walk = await self.walk(from_slug, to_slug)
        return walk.cycle

    async def find_cycle(self, from_slug: str, to_slug: str) -> list[str] | None:
        """Return the would-be loop ``[to_slug, ..., from_slug]``, or None."""
        walk = await self.walk(from_slug, to_slug)
        return walk.chain if walk.cycle else None

    async def check_edge(self, from_slug: str, to_slug: str) -> None:
        """Raise if ``from_slug -> to_slug`` may not be persisted."""
        walk = await self.walk(from_slug, to_slug)

        if walk.cycle:
            logger.info(
                "redirect_cycle_rejected",
                from_slug=from_slug,
                to_slug=to_slug,
                chain=walk.chain,
            )
            raise CircularRedirectError(
                normalize_slug(from_slug), normalize_slug(to_slug), walk.chain
            )

        if walk.exhausted:
            logger.info(
                "redirect_chain_too_long",
                from_slug=from_slug,
                to_slug=to_slug,
                chain=walk.chain,
            )
            raise RedirectChainTooLongError(
                normalize_slug(from_slug),
                normalize_slug(to_slug),
                walk.chain,
                self.config.max_redirect_depth,
            )
