"""Slug resolution.

``resolve`` performs a single lookup and leaves redirect hops to the client.
``resolve_fully`` follows redirects to the final record for tooling such as
the sitemap builder and the admin API.
"""

from dataclasses import dataclass
from enum import Enum

from url_manager.core.logging import get_logger
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.exceptions import DepthExceededError
from url_manager.modules.urls.models import UrlRecord, UrlStatus, normalize_slug
from url_manager.modules.urls.store import SlugStore

logger = get_logger(__name__)


class NotFoundReason(str, Enum):
    MISSING = "missing"
    INACTIVE = "inactive"
    MISSING_TARGET = "missing_target"
    DANGLING = "dangling"


@dataclass(frozen=True)
class Active:
    record: UrlRecord


@dataclass(frozen=True)
class Redirect:
    target_slug: str
    code: int
    record: UrlRecord


@dataclass(frozen=True)
class NotFound:
    slug: str
    reason: NotFoundReason = NotFoundReason.MISSING


ResolutionResult = Active | Redirect | NotFound
FinalResult = Active | NotFound


class RedirectResolver:
    def __init__(self, store: SlugStore, config: UrlManagerConfig) -> None:
        self.store = store
        self.config = config

    async def resolve(self, slug: str) -> ResolutionResult:
        slug = normalize_slug(slug)
        record = await self.store.get(slug)
        return self._classify(slug, record)

    async def resolve_fully(self, slug: str, max_depth: int | None = None) -> FinalResult:
        """Follow redirects until an Active or NotFound result.

        At most ``max_depth`` redirect hops are followed. Reaching a redirect
        after that raises DepthExceededError with the slugs walked so far.
        """
        if max_depth is None:
            max_depth = self.config.max_redirect_depth

        current = normalize_slug(slug)
        chain = [current]

        for hop in range(max_depth + 1):
            record = await self.store.get(current)
            result = self._classify(current, record)

            if not isinstance(result, Redirect):
                if hop > 0 and isinstance(result, NotFound) and record is None:
                    logger.warning(
                        "redirect_target_dangling",
                        slug=chain[0],
                        target=current,
                        chain=chain,
                    )
                    return NotFound(slug=current, reason=NotFoundReason.DANGLING)
                return result

            if hop == max_depth:
                break

            current = result.target_slug
            chain.append(current)

        logger.error(
            "redirect_depth_exceeded",
            slug=chain[0],
            chain=chain,
            max_depth=max_depth,
        )
        raise DepthExceededError(chain[0], chain, max_depth)

    def _classify(self, slug: str, record: UrlRecord | None) -> ResolutionResult:
        if record is None:
            return NotFound(slug=slug, reason=NotFoundReason.MISSING)

        if record.status == UrlStatus.ACTIVE.value:
            return Active(record=record)

        if record.status == UrlStatus.REDIRECT.value:
            if not record.redirect_to:
                logger.warning("redirect_without_target", slug=slug)
                return NotFound(slug=slug, reason=NotFoundReason.MISSING_TARGET)
            return Redirect(
                target_slug=normalize_slug(record.redirect_to),
                code=record.redirect_code or self.config.default_redirect_code,
                record=record,
            )

        return NotFound(slug=slug, reason=NotFoundReason.INACTIVE)
