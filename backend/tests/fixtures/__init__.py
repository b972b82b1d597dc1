"""Test fixtures and factories."""

from fixtures.factories import (
    FakeEntity,
    FakeEntityFactory,
    RedirectRecordFactory,
    UrlRecordFactory,
)

__all__ = [
    "FakeEntity",
    "FakeEntityFactory",
    "RedirectRecordFactory",
    "UrlRecordFactory",
]
