"""Write sitemap files to disk.

Usage:
    python -m url_manager.scripts.generate_sitemap [--base-url URL] [--output DIR]

Writes sitemap.xml, plus sitemap-<n>.xml files and an index when the site has
more URLs than fit in one file.
"""

import asyncio
import sys
from pathlib import Path

from url_manager.config import settings
from url_manager.core.database import get_db_context
from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.sitemap import SitemapService


async def write_sitemaps(base_url: str, output: Path) -> list[Path]:
    output.mkdir(parents=True, exist_ok=True)

    async with get_db_context() as db:
        service = SitemapService(db, UrlManagerConfig.from_settings())
        files = await service.generate(base_url)

    written = []
    for name, content in files.items():
        path = output / name
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


async def main():
    """Main function."""
    import argparse

    parser = argparse.ArgumentParser(description="Generate sitemap files")
    parser.add_argument(
        "--base-url",
        default=settings.public_base_url,
        help="Absolute site URL used in <loc> entries",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("public"),
        help="Directory to write sitemap files into",
    )
    args = parser.parse_args()

    if not settings.sitemap_enabled:
        print("ℹ️  Sitemap generation is disabled (SITEMAP_ENABLED=false)")
        return

    try:
        written = await write_sitemaps(args.base_url, args.output)
    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    for path in written:
        print(f"✅ Wrote {path}")


if __name__ == "__main__":
    asyncio.run(main())
