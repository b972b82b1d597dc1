"""Public front controller: sitemap and slug resolution.

Included last so the catch-all slug route never shadows API routes.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.config import settings
from url_manager.core.database import get_db
from url_manager.core.exceptions import NotFoundError
from url_manager.core.logging import get_logger
from url_manager.core.redis import get_redis_client
from url_manager.modules.urls.config import UrlManagerConfig, get_url_config
from url_manager.modules.urls.exceptions import UrlNotFoundError
from url_manager.modules.urls.resolver import Active, Redirect
from url_manager.modules.urls.schemas import PublicUrlResponse
from url_manager.modules.urls.service import UrlService
from url_manager.modules.urls.sitemap import SitemapService
from url_manager.modules.urls.visits import VisitDispatcher

logger = get_logger(__name__)

router = APIRouter()


def get_visit_dispatcher(
    config: UrlManagerConfig = Depends(get_url_config),
) -> VisitDispatcher:
    return VisitDispatcher(get_redis_client(), config)


def _base_url(request: Request) -> str:
    if settings.public_base_url and not settings.is_development:
        return settings.public_base_url.rstrip("/")
    return f"{request.url.scheme}://{request.url.netloc}"


def _xml(content: str) -> PlainTextResponse:
    return PlainTextResponse(
        content=content,
        media_type="application/xml",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get(
    "/sitemap.xml",
    response_class=PlainTextResponse,
    summary="Get sitemap.xml",
    tags=["Public - URLs"],
)
async def get_sitemap(
    request: Request,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> PlainTextResponse:
    """Urlset, or a sitemap index when the site has more URLs than fit in one file."""
    if not config.sitemap_enabled:
        raise NotFoundError("Sitemap")

    service = SitemapService(db, config)
    base_url = _base_url(request)
    pages = await service.page_count()

    if pages > 1:
        return _xml(service.generate_sitemap_index_xml(base_url, pages))
    return _xml(await service.generate_sitemap_xml(base_url))


@router.get(
    "/sitemap-{page}.xml",
    response_class=PlainTextResponse,
    summary="Get sitemap page",
    tags=["Public - URLs"],
)
async def get_sitemap_page(
    page: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> PlainTextResponse:
    if not config.sitemap_enabled:
        raise NotFoundError("Sitemap")

    service = SitemapService(db, config)
    if page < 1 or page > await service.page_count():
        raise NotFoundError("Sitemap page", str(page))

    return _xml(await service.generate_sitemap_xml(_base_url(request), page))


@router.get(
    "/{slug:path}",
    response_model=PublicUrlResponse,
    summary="Resolve slug",
    tags=["Public - URLs"],
    responses={
        301: {"description": "Moved permanently"},
        302: {"description": "Found"},
        307: {"description": "Temporary redirect"},
        308: {"description": "Permanent redirect"},
        404: {"description": "No content for this slug"},
    },
)
async def resolve_slug(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
    dispatcher: VisitDispatcher = Depends(get_visit_dispatcher),
) -> Response | PublicUrlResponse:
    """Serve the active record, redirect one hop, or 404.

    Only one hop is followed; the client requests the target itself.
    """
    service = UrlService(db, config)
    result = await service.resolve(slug)

    if isinstance(result, Redirect):
        location = "/" + result.target_slug
        if request.url.query:
            location = f"{location}?{request.url.query}"
        return RedirectResponse(url=location, status_code=result.code)

    if isinstance(result, Active):
        record = result.record
        background_tasks.add_task(dispatcher.dispatch, record)
        return PublicUrlResponse(
            slug=record.slug,
            type=record.type,
            owner_type=record.owner_type,
            owner_id=record.owner_id,
            meta=record.seo_metadata(),
            last_modified_at=record.last_modified_at,
        )

    raise UrlNotFoundError(result.slug, result.reason.value)
