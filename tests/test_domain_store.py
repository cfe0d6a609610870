from datetime import timedelta
from unittest import mock

import pytest

from opemstore.domain import Domain, DomainFilter
from opemstore.domain_store import (
    ExpiringCache,
    find,
    find_by_code,
    get_from_cache,
    new_cache,
    new_cache_resolver,
)
from opemstore.query import DocumentNotFoundError

TARGET_DOMAIN = "cvf"


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeCollection:
    def __init__(self, docs):
        self.docs = [dict(d) for d in docs]
        self.find_one_calls = 0
        self.find_kwargs = None

    @staticmethod
    def _matches(doc, flt):
        return all(doc.get(k) == v for k, v in flt.items())

    def find_one(self, flt, **kwargs):
        self.find_one_calls += 1
        return next((dict(d) for d in self.docs if self._matches(d, flt)), None)

    def find(self, flt, **kwargs):
        self.find_kwargs = kwargs
        return iter([dict(d) for d in self.docs if self._matches(d, flt)])

    def count_documents(self, flt):
        return sum(1 for d in self.docs if self._matches(d, flt))


@pytest.fixture
def collection():
    return FakeCollection(
        [
            {"code": "cvf", "name": "Cvf domain", "objType": "domain"},
            {"code": "other", "name": "Other domain", "objType": "domain"},
        ]
    )


def test_cache_expires_like_source_scenario(collection):
    clock = FakeClock()
    with mock.patch("time.monotonic", clock):
        new_cache(5, 600)
    resolver = new_cache_resolver(collection)

    first = get_from_cache(resolver, TARGET_DOMAIN)
    assert first.name == "Cvf domain"
    assert collection.find_one_calls == 1

    clock.now += 2
    second = get_from_cache(resolver, TARGET_DOMAIN)
    assert second is first
    assert collection.find_one_calls == 1

    clock.now += 10
    third = get_from_cache(resolver, TARGET_DOMAIN)
    assert third.code == TARGET_DOMAIN
    assert collection.find_one_calls == 2


def test_get_from_cache_returns_none_for_missing_domain(collection):
    new_cache(timedelta(minutes=5), timedelta(minutes=10))
    resolver = new_cache_resolver(collection)
    assert get_from_cache(resolver, "missing") is None
    assert get_from_cache(resolver, "missing") is None
    assert collection.find_one_calls == 2


def test_resolver_raises_when_not_found(collection):
    resolver = new_cache_resolver(collection)
    with pytest.raises(DocumentNotFoundError):
        resolver("missing")


def test_resolver_returns_domain(collection):
    resolver = new_cache_resolver(collection)
    assert resolver("other").name == "Other domain"


def test_find_by_code_found(collection):
    domain, found = find_by_code(collection, "cvf", True)
    assert found is True
    assert domain.name == "Cvf domain"
    assert domain.obj_type == "domain"


def test_find_by_code_not_found_allowed(collection):
    domain, found = find_by_code(collection, "missing", False)
    assert found is False
    assert domain == Domain(code="missing")


def test_find_by_code_must_find_raises(collection):
    with pytest.raises(DocumentNotFoundError):
        find_by_code(collection, "missing", True)


def test_find_with_count(collection):
    flt = DomainFilter()
    flt.or_().and_code_not_eq_to("nothing")
    flt = DomainFilter()
    result = find(collection, flt, True, limit=10)
    assert result.records == 2
    assert [d.code for d in result.data] == ["cvf", "other"]
    assert collection.find_kwargs == {"limit": 10}


def test_find_without_count(collection):
    flt = DomainFilter()
    flt.or_().and_code_eq_to("other")
    result = find(collection, flt, False)
    assert result.records == 0
    assert [d.name for d in result.data] == ["Other domain"]


def test_expiring_cache_get_set():
    clock = FakeClock()
    cache = ExpiringCache(10, 0, clock=clock)
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert cache.get("b") is None
    clock.now += 10
    assert cache.get("a") == 1
    clock.now += 0.5
    assert cache.get("a") is None


def test_expiring_cache_delete_expired():
    clock = FakeClock()
    cache = ExpiringCache(5, 0, clock=clock)
    cache.set("a", 1)
    clock.now += 3
    cache.set("b", 2)
    clock.now += 3
    assert cache.delete_expired() == 1
    assert len(cache) == 1
    assert cache.get("b") == 2


def test_expiring_cache_purges_on_interval():
    clock = FakeClock()
    cache = ExpiringCache(1, 5, clock=clock)
    cache.set("a", 1)
    clock.now += 6
    cache.set("b", 2)
    assert len(cache) == 1


def test_expiring_cache_without_expiry_keeps_entries():
    clock = FakeClock()
    cache = ExpiringCache(0, 0, clock=clock)
    cache.set("a", "value")
    clock.now += 1_000_000
    assert cache.get("a") == "value"
    assert cache.delete_expired() == 0