"""Factory Boy factories for test data generation."""

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

import factory
from faker import Faker

from url_manager.modules.urls.models import (
    SENTINEL_OWNER_TYPE,
    EntityKind,
    UrlRecord,
    UrlStatus,
    UrlType,
)
from url_manager.modules.urls.owners import EntityRef

fake = Faker("en_US")


@dataclass
class FakeEntity:
    """Minimal entity satisfying the UrlOwner protocol."""

    kind: EntityKind
    id: str
    path: str
    is_active: bool = True

    def owner_ref(self) -> EntityRef:
        return EntityRef(kind=self.kind, id=self.id)

    def canonical_path(self) -> str:
        return self.path

    def is_active_for_url(self) -> bool:
        return self.is_active


class FakeEntityFactory(factory.Factory):
    """Factory for entities that own URLs."""

    class Meta:
        model = FakeEntity

    kind = EntityKind.PRODUCT
    id = factory.LazyFunction(lambda: str(uuid4()))
    path = factory.Sequence(lambda n: f"products/{fake.slug()}-{n}")
    is_active = True


class UrlRecordFactory(factory.Factory):
    """Factory for entity-owned UrlRecord rows."""

    class Meta:
        model = UrlRecord

    id = factory.LazyFunction(uuid4)
    slug = factory.Sequence(lambda n: f"{fake.slug()}-{n}")
    owner_type = EntityKind.PRODUCT.value
    owner_id = factory.LazyFunction(lambda: str(uuid4()))
    type = UrlType.ENTITY.value
    status = UrlStatus.ACTIVE.value
    redirect_to = None
    redirect_code = None
    meta = None
    visits = 0
    last_visited_at = None
    last_modified_at = factory.LazyFunction(lambda: datetime.now(timezone.utc))
    created_at = factory.LazyFunction(lambda: datetime.now(timezone.utc))
    updated_at = factory.LazyFunction(lambda: datetime.now(timezone.utc))


class RedirectRecordFactory(UrlRecordFactory):
    """Factory for sentinel-owned redirect rows."""

    owner_type = SENTINEL_OWNER_TYPE
    owner_id = None
    type = UrlType.REDIRECT.value
    status = UrlStatus.REDIRECT.value
    redirect_to = factory.Sequence(lambda n: f"target-{n}")
    redirect_code = 301
