"""Domain lookups in a MongoDB collection, with an expiring cache in front."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Hashable, Union

from opemstore.domain import Domain, DomainFilter, QueryResult
from opemstore.query import DocumentNotFoundError, Filter

logger = logging.getLogger(__name__)

Duration = Union[float, int, timedelta]
CacheResolver = Callable[[str], Domain]

EXPIRY_DURATION = timedelta(minutes=5)
PURGE_EXPIRED_DURATION = timedelta(minutes=10)


def _seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


class ExpiringCache:
    """A thread-safe map whose entries expire a fixed time after being set.

    An expiry of zero or less keeps entries forever. Expired entries are
    never returned; they are dropped from memory every purge interval.
    """

    def __init__(
        self,
        expiry: Duration = EXPIRY_DURATION,
        purge_interval: Duration = PURGE_EXPIRED_DURATION,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._expiry = _seconds(expiry)
        self._purge_interval = _seconds(purge_interval)
        self._clock = clock or time.monotonic
        self._items: dict[Hashable, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()
        self._last_purge = self._clock()

    def _purge(self, now: float) -> int:
        expired = [
            key
            for key, (_, expires) in self._items.items()
            if expires is not None and now > expires
        ]
        for key in expired:
            del self._items[key]
        self._last_purge = now
        return len(expired)

    def _maybe_purge(self, now: float) -> None:
        if self._purge_interval > 0 and now - self._last_purge >= self._purge_interval:
            self._purge(now)

    def get(self, key: Hashable) -> Any:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            now = self._clock()
            self._maybe_purge(now)
            entry = self._items.get(key)
            if entry is None:
                return None
            value, expires = entry
            if expires is not None and now > expires:
                return None
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store the value with the cache's default expiry."""
        with self._lock:
            now = self._clock()
            self._maybe_purge(now)
            expires = now + self._expiry if self._expiry > 0 else None
            self._items[key] = (value, expires)

    def delete_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        with self._lock:
            return self._purge(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


_domain_cache: ExpiringCache | None = None


def new_cache(expiry: Duration, purge_interval: Duration) -> ExpiringCache:
    """Replace the domain cache with a new, empty one and return it."""
    global _domain_cache
    logger.info(
        "r3ds9-mongodb/domain/new-cache: expiry=%s purge=%s", expiry, purge_interval
    )
    _domain_cache = ExpiringCache(expiry, purge_interval)
    return _domain_cache


def find(collection: Any, flt: Filter, with_count: bool, **kwargs: Any) -> QueryResult:
    """Find the domains matching the filter; extra arguments go to the find call."""
    query = flt.build()
    result = QueryResult()
    if with_count:
        result.records = int(collection.count_documents(query))
    for doc in collection.find(query, **kwargs):
        result.data.append(Domain.from_document(doc))
    return result


def find_by_code(
    collection: Any, code: str, must_find: bool, **kwargs: Any
) -> tuple[Domain, bool]:
    """Find a domain by code.

    When nothing is found and must_find is false, return a domain holding
    only the code together with False; otherwise raise DocumentNotFoundError.
    """
    flt = DomainFilter()
    flt.or_().and_code_eq_to(code)
    doc = collection.find_one(flt.build(), **kwargs)
    if doc is None:
        if must_find:
            logger.debug("mdb-domain::find-by-code document not found: %s", code)
            raise DocumentNotFoundError(f"domain not found: {code}")
        logger.debug("mdb-domain::find-by-code document not found but allowed: %s", code)
        return Domain(code=code), False
    return Domain.from_document(doc), True


def new_cache_resolver(collection: Any) -> CacheResolver:
    """Return a resolver that loads a domain by code or raises DocumentNotFoundError."""

    def resolve(code: str) -> Domain:
        domain, found = find_by_code(collection, code, False)
        if not found:
            raise DocumentNotFoundError(f"domain not found: {code}")
        return domain

    return resolve


def get_from_cache(resolver: CacheResolver, code: str) -> Domain | None:
    """Return the domain from the cache, resolving and caching it on a miss.

    Return None when the resolver fails. new_cache must have been called.
    """
    if _domain_cache is None:
        raise RuntimeError("domain cache not initialised; call new_cache first")
    item = _domain_cache.get(code)
    if item is None:
        logger.warning("r3ds9-mongodb/domain/get-domain-from-cache cache miss: %s", code)
        try:
            item = resolver(code)
        except Exception:
            logger.exception("r3ds9-mongodb/domain/get-domain-from-cache")
            return None
        _domain_cache.set(code, item)
    return item