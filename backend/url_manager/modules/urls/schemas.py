"""Pydantic schemas for URL module."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from url_manager.modules.urls.models import UrlStatus, UrlType, normalize_slug


# ============================================================================
# URL Record Schemas
# ============================================================================


class UrlResponse(BaseModel):
    """Schema for URL record response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    owner_type: str
    owner_id: str | None
    type: UrlType
    status: UrlStatus
    redirect_to: str | None
    redirect_code: int | None
    meta: dict[str, Any] | None
    visits: int
    last_visited_at: datetime | None
    last_modified_at: datetime
    created_at: datetime
    updated_at: datetime


class UrlListResponse(BaseModel):
    """Schema for URL list response."""

    items: list[UrlResponse]
    total: int
    page: int
    page_size: int


class UrlUpdate(BaseModel):
    """Schema for updating a URL record from the admin API.

    Only the Active/Inactive toggle is exposed; redirects are created through
    the redirect endpoint.
    """

    status: Literal["active", "inactive"] | None = None
    meta: dict[str, Any] | None = None


# ============================================================================
# Redirect Schemas
# ============================================================================


class RedirectCreate(BaseModel):
    """Schema for creating a manual redirect."""

    from_slug: str = Field(..., min_length=1, max_length=500)
    to_slug: str = Field(..., min_length=1, max_length=500)
    code: int | None = Field(default=None, description="301, 302, 307 or 308")

    @field_validator("from_slug", "to_slug")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        return normalize_slug(v)


# ============================================================================
# Resolution Schemas
# ============================================================================


class ResolutionResponse(BaseModel):
    """Outcome of resolving a slug."""

    slug: str
    result: Literal["active", "redirect", "not_found"]
    target_slug: str | None = None
    code: int | None = None
    reason: str | None = None
    record: UrlResponse | None = None


class PublicUrlResponse(BaseModel):
    """Resolved page payload returned by the front controller."""

    slug: str
    type: UrlType
    owner_type: str
    owner_id: str | None
    meta: dict[str, Any]
    last_modified_at: datetime
