"""Check the redirect graph for integrity problems.

Usage:
    python -m url_manager.scripts.check_redirects [--max-depth N]

Reports redirect loops, redirects whose target no longer exists and chains
that take more than max-depth hops to reach content. Exits with status 1 when
anything is found, so it can run as a scheduled job or CI step.
"""

import asyncio
import sys
from dataclasses import dataclass, field

from url_manager.config import settings
from url_manager.core.database import get_db_context
from url_manager.modules.urls.store import SlugStore


@dataclass
class RedirectReport:
    cycles: list[list[str]] = field(default_factory=list)
    dangling: dict[str, str] = field(default_factory=dict)
    missing_target: list[str] = field(default_factory=list)
    too_long: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not (self.cycles or self.dangling or self.missing_target or self.too_long)


def _canonical_cycle(cycle: list[str]) -> tuple[str, ...]:
    start = cycle.index(min(cycle))
    return tuple(cycle[start:] + cycle[:start])


def analyze_redirect_graph(
    edges: dict[str, str | None],
    existing: set[str],
    max_depth: int,
) -> RedirectReport:
    """Inspect redirect edges ``{slug: target}``.

    ``existing`` holds every non-redirect slug that edges point at.
    """
    report = RedirectReport()
    seen_cycles: set[tuple[str, ...]] = set()

    for slug, target in edges.items():
        if not target:
            report.missing_target.append(slug)
            continue
        if target not in edges and target not in existing:
            report.dangling[slug] = target

    for start in edges:
        path = [start]
        position = {start: 0}
        current = start

        while edges.get(current):
            next_slug = edges[current]
            if next_slug in position:
                cycle = _canonical_cycle(path[position[next_slug]:])
                if cycle not in seen_cycles:
                    seen_cycles.add(cycle)
                    report.cycles.append(list(cycle))
                break
            position[next_slug] = len(path)
            path.append(next_slug)
            current = next_slug
        else:
            hops = len(path) - 1
            if hops > max_depth:
                report.too_long[start] = hops

    return report


def print_report(report: RedirectReport, total: int, max_depth: int) -> None:
    print("=" * 60)
    print(f"🔍 Checked {total} redirects (max depth {max_depth})")
    print("=" * 60)
    print()

    if report.ok:
        print("✅ Redirect graph is consistent!")
        return

    if report.cycles:
        print(f"❌ Redirect loops: {len(report.cycles)}")
        for cycle in report.cycles:
            print(f"   {' -> '.join([*cycle, cycle[0]])}")
        print()

    if report.dangling:
        print(f"⚠️  Dangling redirects: {len(report.dangling)}")
        for slug, target in report.dangling.items():
            print(f"   {slug} -> {target} (missing)")
        print()

    if report.missing_target:
        print(f"⚠️  Redirects without target: {len(report.missing_target)}")
        for slug in report.missing_target:
            print(f"   {slug}")
        print()

    if report.too_long:
        print(f"⚠️  Chains longer than {max_depth} hops: {len(report.too_long)}")
        for slug, hops in report.too_long.items():
            print(f"   {slug} ({hops} hops)")
        print()


async def check_redirects(max_depth: int) -> RedirectReport:
    async with get_db_context() as db:
        store = SlugStore(db)
        edges = await store.redirect_edges()
        targets = sorted({t for t in edges.values() if t and t not in edges})
        existing = await store.existing_slugs(targets)

    report = analyze_redirect_graph(edges, existing, max_depth)
    print_report(report, len(edges), max_depth)
    return report


async def main():
    """Main function."""
    import argparse

    parser = argparse.ArgumentParser(description="Check redirect graph integrity")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=settings.max_redirect_depth,
        help="Maximum allowed hops from a redirect to content",
    )
    args = parser.parse_args()

    try:
        report = await check_redirects(args.max_depth)
    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    if not report.ok:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
