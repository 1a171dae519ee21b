"""Tests for the directory TTL cache."""

from __future__ import annotations

from conftest import FakeClock

from courier.outbound.directory_cache import (
    DIRECTORY_CACHE_TTL_MS,
    DirectoryCache,
    build_directory_cache_key,
)

CONFIG = object()


class TestBuildDirectoryCacheKey:
    def test_format(self):
        assert build_directory_cache_key("slack", "work", "group", "cache") == "slack:work:group:cache"

    def test_missing_account_maps_to_default(self):
        assert build_directory_cache_key("discord", None, "user", "live") == "discord:default:user:live"

    def test_empty_account_maps_to_default(self):
        assert build_directory_cache_key("discord", "", "user", "live") == "discord:default:user:live"


class TestTtl:
    def test_default_ttl_is_thirty_minutes(self):
        assert DIRECTORY_CACHE_TTL_MS == 1_800_000

    def test_hit_before_expiry(self):
        clock = FakeClock()
        cache: DirectoryCache[list[str]] = DirectoryCache(clock=clock)
        cache.set("k", ["a"], CONFIG)
        clock.advance(29 * 60)
        assert cache.get("k", CONFIG) == ["a"]

    def test_exactly_at_ttl_is_still_fresh(self):
        clock = FakeClock()
        cache: DirectoryCache[list[str]] = DirectoryCache(clock=clock)
        cache.set("k", ["a"], CONFIG)
        clock.advance(30 * 60)
        assert cache.get("k", CONFIG) == ["a"]

    def test_expired_entry_is_evicted(self):
        clock = FakeClock()
        cache: DirectoryCache[list[str]] = DirectoryCache(clock=clock)
        cache.set("k", ["a"], CONFIG)
        clock.advance(31 * 60)
        assert cache.get("k", CONFIG) is None
        assert len(cache) == 0

    def test_expiry_counts_from_fetch_not_access(self):
        clock = FakeClock()
        cache: DirectoryCache[list[str]] = DirectoryCache(clock=clock)
        cache.set("k", ["a"], CONFIG)
        clock.advance(20 * 60)
        assert cache.get("k", CONFIG) == ["a"]
        clock.advance(11 * 60)
        assert cache.get("k", CONFIG) is None

    def test_custom_ttl(self):
        clock = FakeClock()
        cache: DirectoryCache[str] = DirectoryCache(ttl_seconds=5, clock=clock)
        cache.set("k", "v", CONFIG)
        clock.advance(6)
        assert cache.get("k", CONFIG) is None

    def test_missing_key(self):
        cache: DirectoryCache[str] = DirectoryCache()
        assert cache.get("nope", CONFIG) is None


class TestConfigInvalidation:
    def test_different_config_drops_everything(self):
        cache: DirectoryCache[str] = DirectoryCache()
        cache.set("a", "1", CONFIG)
        cache.set("b", "2", CONFIG)

        assert cache.get("a", object()) is None
        assert len(cache) == 0

    def test_same_config_object_keeps_entries(self):
        cache: DirectoryCache[str] = DirectoryCache()
        cache.set("a", "1", CONFIG)
        assert cache.get("a", CONFIG) == "1"

    def test_set_with_new_config_resets_first(self):
        cache: DirectoryCache[str] = DirectoryCache()
        cache.set("a", "1", CONFIG)
        other = object()
        cache.set("b", "2", other)
        assert cache.get("a", other) is None
        assert cache.get("b", other) == "2"


class TestClear:
    def test_clear_matching(self):
        cache: DirectoryCache[str] = DirectoryCache()
        cache.set("slack:default:group:cache", "1", CONFIG)
        cache.set("slack:default:group:live", "2", CONFIG)
        cache.set("discord:default:group:cache", "3", CONFIG)

        cache.clear_matching(lambda key: key.startswith("slack:"))

        assert cache.get("slack:default:group:cache", CONFIG) is None
        assert cache.get("slack:default:group:live", CONFIG) is None
        assert cache.get("discord:default:group:cache", CONFIG) == "3"

    def test_clear_all(self):
        cache: DirectoryCache[str] = DirectoryCache()
        cache.set("a", "1", CONFIG)
        cache.clear()
        assert len(cache) == 0

    def test_clear_with_config_adopts_it(self):
        cache: DirectoryCache[str] = DirectoryCache()
        cache.set("a", "1", CONFIG)
        other = object()
        cache.clear(other)
        cache.set("b", "2", other)
        assert cache.get("b", other) == "2"


class TestConcurrentAccess:
    def test_parallel_set_and_get_from_threads(self):
        from concurrent.futures import ThreadPoolExecutor

        cache: DirectoryCache[int] = DirectoryCache()

        def _work(i: int) -> int | None:
            key = f"slack:acct{i % 4}:group:cache"
            cache.set(key, i % 4, CONFIG)
            return cache.get(key, CONFIG)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(_work, range(200)))

        assert len(cache) == 4
        for i, value in enumerate(results):
            assert value == i % 4
