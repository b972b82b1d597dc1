"""URL module database models."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from url_manager.core.base_model import Base, TimestampMixin, UUIDMixin, utcnow

# Owner type of records created for manual redirects
SENTINEL_OWNER_TYPE = "self"

REDIRECT_CODES = (301, 302, 307, 308)

DEFAULT_SEO_META: dict[str, Any] = {
    "title": None,
    "description": None,
    "keywords": None,
    "og_image": None,
    "og_type": "website",
    "twitter_card": "summary_large_image",
}


class UrlType(str, Enum):
    """Kind of resource a URL record points at."""

    ENTITY = "entity"
    CATEGORY = "category"
    SELLER = "seller"
    MENU = "menu"
    BRAND = "brand"
    PAGE = "page"
    BLOG = "blog"
    REDIRECT = "redirect"


class UrlStatus(str, Enum):
    """URL record status.

    Active <-> Inactive are toggled by the owning entity; Active and Inactive
    records become Redirect on rename. Redirect is never reverted automatically.
    """

    ACTIVE = "active"
    REDIRECT = "redirect"
    INACTIVE = "inactive"


class EntityKind(str, Enum):
    """Closed set of entity kinds that may own a URL record."""

    PRODUCT = "product"
    CATEGORY = "category"
    SELLER = "seller"
    MENU = "menu"
    BRAND = "brand"
    PAGE = "page"
    BLOG = "blog"

    @property
    def url_type(self) -> UrlType:
        return _KIND_TO_URL_TYPE[self]


_KIND_TO_URL_TYPE = {
    EntityKind.PRODUCT: UrlType.ENTITY,
    EntityKind.CATEGORY: UrlType.CATEGORY,
    EntityKind.SELLER: UrlType.SELLER,
    EntityKind.MENU: UrlType.MENU,
    EntityKind.BRAND: UrlType.BRAND,
    EntityKind.PAGE: UrlType.PAGE,
    EntityKind.BLOG: UrlType.BLOG,
}


def normalize_slug(slug: str) -> str:
    """Strip surrounding whitespace and slashes from a slug."""
    return slug.strip().strip("/")


class UrlRecord(Base, UUIDMixin, TimestampMixin):
    """A slug and what it resolves to.

    Owned 1:1 by an entity, or by the "self" sentinel when it only exists to
    carry a manual redirect.
    """

    __tablename__ = "urls"

    slug: Mapped[str] = mapped_column(String(500), nullable=False)

    # Polymorphic owner ("self" + NULL id for manual redirects)
    owner_type: Mapped[str] = mapped_column(
        String(50), default=SENTINEL_OWNER_TYPE, nullable=False
    )
    owner_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    type: Mapped[str] = mapped_column(
        String(20), default=UrlType.ENTITY.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=UrlStatus.ACTIVE.value, nullable=False
    )

    # Redirect target (slug) and HTTP code
    redirect_to: Mapped[str | None] = mapped_column(String(500), nullable=True)
    redirect_code: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # SEO metadata (title, description, keywords, og_image, ...)
    meta: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Analytics, written only by the visit worker
    visits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_visited_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    last_modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_urls_slug"),
        UniqueConstraint("owner_type", "owner_id", name="uq_urls_owner"),
        Index("ix_urls_status_type", "status", "type"),
        Index("ix_urls_redirect_to", "redirect_to"),
        CheckConstraint(
            "redirect_code IS NULL OR redirect_code IN (301, 302, 307, 308)",
            name="ck_urls_redirect_code",
        ),
        CheckConstraint(
            "status IN ('active', 'redirect', 'inactive')",
            name="ck_urls_status",
        ),
        CheckConstraint(
            "type IN ('entity', 'category', 'seller', 'menu', 'brand', 'page', 'blog', 'redirect')",
            name="ck_urls_type",
        ),
    )

    def __repr__(self) -> str:
        if self.status == UrlStatus.REDIRECT.value:
            return f"<UrlRecord {self.slug} -> {self.redirect_to}>"
        return f"<UrlRecord {self.slug} ({self.status})>"

    @property
    def is_active(self) -> bool:
        return self.status == UrlStatus.ACTIVE.value

    @property
    def is_redirect(self) -> bool:
        return self.status == UrlStatus.REDIRECT.value

    @property
    def is_manual(self) -> bool:
        """True for sentinel-owned records (manual redirects)."""
        return self.owner_type == SENTINEL_OWNER_TYPE

    @property
    def path(self) -> str:
        return "/" + self.slug

    @property
    def should_index(self) -> bool:
        """Only active records are exposed to search engines."""
        return self.is_active and not (self.meta or {}).get("noindex", False)

    def seo_metadata(self) -> dict[str, Any]:
        """Stored meta merged over the defaults."""
        return {**DEFAULT_SEO_META, **(self.meta or {})}

    def touch(self) -> None:
        """Mark slug, status or target as changed."""
        self.last_modified_at = utcnow()

    def mark_redirect(self, to_slug: str, code: int) -> None:
        """Convert this record into a redirect to ``to_slug``."""
        self.status = UrlStatus.REDIRECT.value
        self.type = UrlType.REDIRECT.value
        self.redirect_to = to_slug
        self.redirect_code = code
        self.touch()
