"""Owner references for URL records.

A record is owned either by an application entity or by the "self" sentinel
(manual redirects). Entities stay opaque: the engine only needs their kind,
their id, the slug they want and whether they are publicly visible.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from url_manager.modules.urls.models import SENTINEL_OWNER_TYPE, EntityKind, UrlRecord


@dataclass(frozen=True)
class Sentinel:
    """Owner of manually created redirects."""

    owner_type: str = SENTINEL_OWNER_TYPE
    owner_id: None = None


@dataclass(frozen=True)
class EntityRef:
    """Reference to the entity that owns a URL record."""

    kind: EntityKind
    id: str

    @property
    def owner_type(self) -> str:
        return self.kind.value

    @property
    def owner_id(self) -> str:
        return self.id


Owner = Sentinel | EntityRef

SENTINEL = Sentinel()


@runtime_checkable
class UrlOwner(Protocol):
    """What an entity must expose to own a URL."""

    def owner_ref(self) -> EntityRef:
        ...

    def canonical_path(self) -> str:
        ...

    def is_active_for_url(self) -> bool:
        ...


def owner_of(record: UrlRecord) -> Owner:
    """Rebuild the owner reference stored on a record."""
    if record.owner_type == SENTINEL_OWNER_TYPE or record.owner_id is None:
        return SENTINEL
    return EntityRef(kind=EntityKind(record.owner_type), id=record.owner_id)
