"""
Tests for the tiered cache: TTL staleness, store fallback, coalescing.
"""
import threading
import time
from datetime import timedelta

import pytest

from app.cache import CacheEntry, DataCategory, RequestCoalescer, StatsStore, TieredCache
from app.errors import UpstreamError

STATS_TTL = 6 * 3600
META_TTL = 24 * 3600

PAYLOAD = {"Ahri": {"ALL": {"games": 10, "winRate": 50.0}}}


@pytest.fixture
def ttls():
    return {
        DataCategory.RANK_REGION_STATS: STATS_TTL,
        DataCategory.META: META_TTL,
    }


@pytest.fixture
def sqlite_store():
    store = StatsStore("sqlite://")
    yield store
    store.close()


def _entry(clock, age_seconds=0, payload=None, category=DataCategory.RANK_REGION_STATS):
    return CacheEntry(
        payload=payload if payload is not None else PAYLOAD,
        stored_at=clock() - timedelta(seconds=age_seconds),
        category=category,
    )


# =============================================================================
# TTL
# =============================================================================

def test_fresh_entry_is_returned(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    cache.set("k", _entry(clock))

    entry = cache.get("k")
    assert entry is not None
    assert entry.payload == PAYLOAD


def test_entry_older_than_ttl_is_never_returned(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    cache.set("k", _entry(clock, age_seconds=STATS_TTL + 1))

    assert cache.get("k") is None


def test_entry_expires_as_clock_moves(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    cache.set("k", _entry(clock))

    clock.advance(STATS_TTL - 1)
    assert cache.get("k") is not None

    clock.advance(1)  # age == TTL is already stale
    assert cache.get("k") is None


def test_meta_category_uses_longer_ttl(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    cache.set("versions", _entry(clock, age_seconds=7 * 3600, payload=["14.1.1"], category=DataCategory.META))

    assert cache.get("versions", DataCategory.META) is not None
    assert cache.get("versions", DataCategory.RANK_REGION_STATS) is None


def test_stored_at_never_goes_backwards(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    newer = _entry(clock, payload={"new": {}})
    older = _entry(clock, age_seconds=60, payload={"old": {}})

    cache.set("k", newer)
    cache.set("k", older)

    assert cache.get("k").payload == {"new": {}}


def test_clear_empties_local_tier(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    cache.set("a", _entry(clock))
    cache.set("b", _entry(clock))

    assert cache.clear() == 2
    assert cache.get("a") is None


# =============================================================================
# Persistent tier
# =============================================================================

def test_failing_store_falls_back_to_local(clock, ttls, failing_store):
    cache = TieredCache(store=failing_store, ttl_overrides=ttls, clock=clock)

    cache.set("k", _entry(clock))  # must not raise
    entry = cache.get("k")

    assert entry is not None
    assert entry.payload == PAYLOAD
    assert failing_store.upsert_calls == 1
    assert failing_store.get_calls == 1
    assert cache.get_stats()["store_errors"] == 2


def test_failing_store_miss_is_plain_miss(clock, ttls, failing_store):
    cache = TieredCache(store=failing_store, ttl_overrides=ttls, clock=clock)
    assert cache.get("missing") is None


def test_store_survives_process_restart(clock, ttls, sqlite_store):
    TieredCache(store=sqlite_store, ttl_overrides=ttls, clock=clock).set("k", _entry(clock))

    # New cache object = empty local tier
    restarted = TieredCache(store=sqlite_store, ttl_overrides=ttls, clock=clock)
    entry = restarted.get("k")

    assert entry is not None
    assert entry.payload == PAYLOAD
    assert entry.category == DataCategory.RANK_REGION_STATS


def test_stale_store_entry_is_ignored(clock, ttls, sqlite_store):
    sqlite_store.upsert("k", _entry(clock, age_seconds=STATS_TTL + 1))
    cache = TieredCache(store=sqlite_store, ttl_overrides=ttls, clock=clock)

    assert cache.get("k") is None


def test_store_upsert_replaces_row(clock, sqlite_store):
    sqlite_store.upsert("k", _entry(clock, payload={"v": 1}))
    sqlite_store.upsert("k", _entry(clock, payload={"v": 2}))

    assert sqlite_store.get("k").payload == {"v": 2}


def test_store_get_missing_returns_none(sqlite_store):
    assert sqlite_store.get("nope") is None


# =============================================================================
# Read-through
# =============================================================================

def test_get_or_fetch_fetches_once(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    calls = []

    def fetch():
        calls.append(1)
        return PAYLOAD

    assert cache.get_or_fetch("k", fetch) == PAYLOAD
    assert cache.get_or_fetch("k", fetch) == PAYLOAD
    assert len(calls) == 1

    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_get_or_fetch_refetches_after_ttl(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    calls = []

    def fetch():
        calls.append(1)
        return PAYLOAD

    cache.get_or_fetch("k", fetch)
    clock.advance(STATS_TTL + 1)
    cache.get_or_fetch("k", fetch)

    assert len(calls) == 2


def test_failed_fetch_is_not_cached(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)

    def broken():
        raise UpstreamError("boom")

    with pytest.raises(UpstreamError):
        cache.get_or_fetch("k", broken)

    assert cache.get("k") is None
    assert cache.get_or_fetch("k", lambda: PAYLOAD) == PAYLOAD


def test_concurrent_misses_share_one_fetch(clock, ttls):
    cache = TieredCache(ttl_overrides=ttls, clock=clock)
    started = threading.Event()
    release = threading.Event()
    calls = []
    results = []

    def slow_fetch():
        calls.append(1)
        started.set()
        release.wait(timeout=5)
        return PAYLOAD

    def reader():
        results.append(cache.get_or_fetch("k", slow_fetch))

    first = threading.Thread(target=reader)
    first.start()
    started.wait(timeout=5)

    second = threading.Thread(target=reader)
    second.start()
    time.sleep(0.1)  # let the second reader join the in-flight fetch
    release.set()

    first.join()
    second.join()

    assert len(calls) == 1
    assert results == [PAYLOAD, PAYLOAD]


def test_joined_fetch_shares_the_owners_error():
    coalescer = RequestCoalescer(timeout=5)
    started = threading.Event()
    release = threading.Event()
    errors = []

    def failing_fetch():
        started.set()
        release.wait(timeout=5)
        raise UpstreamError("Upstream returned HTTP 503", status_code=503)

    def reader():
        try:
            coalescer.get_or_fetch("stats:latest:gold:na:*:*", failing_fetch)
        except UpstreamError as e:
            errors.append(e)

    owner = threading.Thread(target=reader)
    owner.start()
    started.wait(timeout=5)
    joiner = threading.Thread(target=reader)
    joiner.start()
    time.sleep(0.1)  # let the joiner find the pending fetch
    assert coalescer.active_requests == 1
    release.set()

    owner.join()
    joiner.join()

    assert len(errors) == 2
    assert errors[0] is errors[1]
    assert coalescer.active_requests == 0


def test_joined_fetch_times_out_as_upstream_error():
    coalescer = RequestCoalescer(timeout=0.05)
    started = threading.Event()
    release = threading.Event()

    def stuck_fetch():
        started.set()
        release.wait(timeout=5)
        return PAYLOAD

    owner = threading.Thread(target=coalescer.get_or_fetch, args=("k", stuck_fetch))
    owner.start()
    started.wait(timeout=5)
    try:
        with pytest.raises(UpstreamError):
            coalescer.get_or_fetch("k", lambda: PAYLOAD)
    finally:
        release.set()
        owner.join()
