"""Admin API routes for URL module."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.core.database import get_db
from url_manager.core.dependencies import Pagination
from url_manager.core.security import PermissionChecker
from url_manager.modules.urls.config import UrlManagerConfig, get_url_config
from url_manager.modules.urls.models import UrlStatus, UrlType
from url_manager.modules.urls.resolver import Active, Redirect
from url_manager.modules.urls.schemas import (
    RedirectCreate,
    ResolutionResponse,
    UrlListResponse,
    UrlResponse,
    UrlUpdate,
)
from url_manager.modules.urls.service import UrlService

router = APIRouter()


@router.get(
    "/admin/urls",
    response_model=UrlListResponse,
    summary="List URL records",
    tags=["Admin - URLs"],
    dependencies=[Depends(PermissionChecker("urls:read"))],
)
async def list_urls(
    pagination: Pagination,
    url_status: UrlStatus | None = Query(default=None, alias="status"),
    url_type: UrlType | None = Query(default=None, alias="type"),
    search: str | None = Query(default=None, max_length=500, description="Slug prefix"),
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> UrlListResponse:
    """List URL records with optional status/type filters."""
    service = UrlService(db, config)
    records, total = await service.list_urls(
        page=pagination.page,
        page_size=pagination.page_size,
        status=url_status,
        url_type=url_type,
        search=search,
    )

    return UrlListResponse(
        items=[UrlResponse.model_validate(r) for r in records],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get(
    "/admin/urls/resolve",
    response_model=ResolutionResponse,
    summary="Resolve a slug",
    tags=["Admin - URLs"],
    dependencies=[Depends(PermissionChecker("urls:read"))],
    responses={status.HTTP_508_LOOP_DETECTED: {"description": "Redirect chain too deep"}},
)
async def resolve_slug(
    slug: str = Query(..., max_length=500),
    full: bool = Query(default=False, description="Follow redirects to the final record"),
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> ResolutionResponse:
    """Show what a slug resolves to, one hop or the whole chain."""
    service = UrlService(db, config)
    result = await (service.resolve_fully(slug) if full else service.resolve(slug))

    if isinstance(result, Active):
        return ResolutionResponse(
            slug=slug,
            result="active",
            record=UrlResponse.model_validate(result.record),
        )
    if isinstance(result, Redirect):
        return ResolutionResponse(
            slug=slug,
            result="redirect",
            target_slug=result.target_slug,
            code=result.code,
            record=UrlResponse.model_validate(result.record),
        )
    return ResolutionResponse(slug=slug, result="not_found", reason=result.reason.value)


@router.get(
    "/admin/urls/{url_id}",
    response_model=UrlResponse,
    summary="Get URL record",
    tags=["Admin - URLs"],
    dependencies=[Depends(PermissionChecker("urls:read"))],
)
async def get_url(
    url_id: UUID,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> UrlResponse:
    service = UrlService(db, config)
    record = await service.get_by_id(url_id)
    return UrlResponse.model_validate(record)


@router.post(
    "/admin/urls/redirects",
    response_model=UrlResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create redirect",
    tags=["Admin - URLs"],
    dependencies=[Depends(PermissionChecker("urls:write"))],
)
async def create_redirect(
    data: RedirectCreate,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> UrlResponse:
    """Create a manual redirect, or convert the record at from_slug into one."""
    service = UrlService(db, config)
    record = await service.create_redirect(data.from_slug, data.to_slug, data.code)
    return UrlResponse.model_validate(record)


@router.patch(
    "/admin/urls/{url_id}",
    response_model=UrlResponse,
    summary="Update URL record",
    tags=["Admin - URLs"],
    dependencies=[Depends(PermissionChecker("urls:write"))],
)
async def update_url(
    url_id: UUID,
    data: UrlUpdate,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> UrlResponse:
    """Toggle status between active and inactive, or replace SEO meta."""
    service = UrlService(db, config)
    record = await service.update(url_id, data)
    return UrlResponse.model_validate(record)


@router.delete(
    "/admin/urls/{url_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete manual redirect",
    tags=["Admin - URLs"],
    dependencies=[Depends(PermissionChecker("urls:write"))],
)
async def delete_url(
    url_id: UUID,
    db: AsyncSession = Depends(get_db),
    config: UrlManagerConfig = Depends(get_url_config),
) -> None:
    service = UrlService(db, config)
    await service.delete_redirect(url_id)
