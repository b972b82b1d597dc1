"""Configuration injected into the URL engine."""

from dataclasses import dataclass, field

from url_manager.config import Settings, get_settings


@dataclass(frozen=True)
class UrlManagerConfig:
    """Resolution and redirect settings.

    Built once from Settings and passed to the store, resolver and services,
    so tests can construct their own without touching the environment.
    """

    max_redirect_depth: int = 5
    default_redirect_code: int = 301

    track_visits: bool = True
    visit_queue_name: str = "url-manager:visits"

    sitemap_enabled: bool = True
    sitemap_max_urls_per_file: int = 10000
    sitemap_default_changefreq: str = "weekly"
    sitemap_default_priority: float = 0.5
    sitemap_priorities: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "UrlManagerConfig":
        settings = settings or get_settings()
        return cls(
            max_redirect_depth=settings.max_redirect_depth,
            default_redirect_code=settings.default_redirect_code,
            track_visits=settings.track_visits,
            visit_queue_name=settings.visit_queue_name,
            sitemap_enabled=settings.sitemap_enabled,
            sitemap_max_urls_per_file=settings.sitemap_max_urls_per_file,
            sitemap_default_changefreq=settings.sitemap_default_changefreq,
            sitemap_default_priority=settings.sitemap_default_priority,
            sitemap_priorities=dict(settings.sitemap_priorities),
        )

    def priority_for(self, url_type: str) -> float:
        return self.sitemap_priorities.get(url_type, self.sitemap_default_priority)


def get_url_config() -> UrlManagerConfig:
    """FastAPI dependency returning the engine configuration."""
    return UrlManagerConfig.from_settings()
