"""Sitemap generation from active URL records."""

import math
from dataclasses import dataclass
from datetime import datetime
from xml.sax.saxutils import escape

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.models import SENTINEL_OWNER_TYPE, UrlRecord, UrlStatus

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    lastmod: datetime | None
    changefreq: str
    priority: float


class SitemapService:
    """Service for generating sitemaps."""

    def __init__(self, db: AsyncSession, config: UrlManagerConfig | None = None) -> None:
        self.db = db
        self.config = config or UrlManagerConfig.from_settings()

    def _indexable_query(self):
        return (
            select(UrlRecord)
            .where(UrlRecord.status == UrlStatus.ACTIVE.value)
            .where(UrlRecord.owner_type != SENTINEL_OWNER_TYPE)
        )

    async def count_urls(self) -> int:
        stmt = select(func.count()).select_from(self._indexable_query().subquery())
        return (await self.db.execute(stmt)).scalar() or 0

    async def page_count(self) -> int:
        """Number of urlset files, counting the homepage entry."""
        total = await self.count_urls() + 1
        return max(1, math.ceil(total / self.config.sitemap_max_urls_per_file))

    async def get_entries(self, base_url: str, page: int = 1) -> list[SitemapEntry]:
        """Entries for one urlset file. The homepage is the first entry of page 1."""
        base_url = base_url.rstrip("/")
        per_file = self.config.sitemap_max_urls_per_file

        entries: list[SitemapEntry] = []
        offset = (page - 1) * per_file - 1
        limit = per_file
        if page == 1:
            entries.append(
                SitemapEntry(
                    loc=f"{base_url}/",
                    lastmod=None,
                    changefreq="daily",
                    priority=1.0,
                )
            )
            offset = 0
            limit = per_file - 1

        stmt = (
            self._indexable_query()
            .order_by(UrlRecord.slug)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)

        for record in result.scalars().all():
            if not record.should_index:
                continue
            entries.append(
                SitemapEntry(
                    loc=f"{base_url}{record.path}",
                    lastmod=record.last_modified_at,
                    changefreq=self.config.sitemap_default_changefreq,
                    priority=self.config.priority_for(record.type),
                )
            )
        return entries

    async def generate_sitemap_xml(self, base_url: str, page: int = 1) -> str:
        """Generate one urlset document."""
        entries = await self.get_entries(base_url, page)

        xml_parts = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<urlset xmlns="{SITEMAP_NS}">',
        ]

        for entry in entries:
            url_parts = ["  <url>", f"    <loc>{escape(entry.loc)}</loc>"]

            if entry.lastmod:
                url_parts.append(f"    <lastmod>{entry.lastmod.strftime('%Y-%m-%d')}</lastmod>")

            url_parts.append(f"    <changefreq>{entry.changefreq}</changefreq>")
            url_parts.append(f"    <priority>{entry.priority:.1f}</priority>")
            url_parts.append("  </url>")
            xml_parts.append("\n".join(url_parts))

        xml_parts.append("</urlset>")

        return "\n".join(xml_parts)

    def generate_sitemap_index_xml(self, base_url: str, pages: int) -> str:
        """Generate a sitemapindex pointing at ``sitemap-<n>.xml`` files."""
        base_url = base_url.rstrip("/")
        xml_parts = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<sitemapindex xmlns="{SITEMAP_NS}">',
        ]
        for page in range(1, pages + 1):
            xml_parts.append(
                f"  <sitemap>\n    <loc>{escape(base_url)}/sitemap-{page}.xml</loc>\n  </sitemap>"
            )
        xml_parts.append("</sitemapindex>")
        return "\n".join(xml_parts)

    async def generate(self, base_url: str) -> dict[str, str]:
        """All sitemap files keyed by file name.

        A single ``sitemap.xml`` urlset when everything fits in one file,
        otherwise ``sitemap.xml`` is an index over ``sitemap-<n>.xml`` files.
        """
        pages = await self.page_count()
        if pages == 1:
            return {"sitemap.xml": await self.generate_sitemap_xml(base_url)}

        files = {"sitemap.xml": self.generate_sitemap_index_xml(base_url, pages)}
        for page in range(1, pages + 1):
            files[f"sitemap-{page}.xml"] = await self.generate_sitemap_xml(base_url, page)
        return files
