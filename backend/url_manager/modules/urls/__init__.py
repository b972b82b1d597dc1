"""URL resolution and redirect graph module."""

from url_manager.modules.urls.config import UrlManagerConfig
from url_manager.modules.urls.lifecycle import UrlLifecycle
from url_manager.modules.urls.models import EntityKind, UrlRecord, UrlStatus, UrlType
from url_manager.modules.urls.owners import EntityRef, Sentinel, UrlOwner
from url_manager.modules.urls.resolver import Active, NotFound, Redirect
from url_manager.modules.urls.service import UrlService

__all__ = [
    "Active",
    "EntityKind",
    "EntityRef",
    "NotFound",
    "Redirect",
    "Sentinel",
    "UrlLifecycle",
    "UrlManagerConfig",
    "UrlOwner",
    "UrlRecord",
    "UrlService",
    "UrlStatus",
    "UrlType",
]
