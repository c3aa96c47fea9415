"""
Tests for the TTL cache.
"""
from fan_inbox.cache import TTLCache, detail_cache_key, list_cache_key


class TestCacheKeys:
    """Test cache key construction."""

    def test_list_key_defaults(self):
        assert list_cache_key(None, None, None) == 'conversations:[null,null,"recent"]'
        assert list_cache_key("all", "", "recent") == list_cache_key(None, None, None)

    def test_search_text_never_matches_absent_search(self):
        assert list_cache_key(None, "none", None) != list_cache_key(None, None, None)
        assert list_cache_key("all", None, None) != list_cache_key(None, "all", None)

    def test_list_key_per_permutation(self):
        assert list_cache_key("active", "jane", "revenue") == 'conversations:["active","jane","revenue"]'
        assert list_cache_key("active", "jane", "revenue") != list_cache_key("active", "jane", "unread")

    def test_detail_key(self):
        assert detail_cache_key("conv_1") == "detail:conv_1"


class TestTTLCache:
    """Test get/set/delete/clear semantics and expiry."""

    def test_get_after_set_returns_same_value(self, cache):
        value = ["a", "b"]
        cache.set("k", value)
        assert cache.get("k") is value

    def test_missing_key_is_a_miss(self, cache):
        assert cache.get("nope") is None
        assert cache.get("nope", "fallback") == "fallback"

    def test_empty_list_is_a_hit(self, cache):
        cache.set("k", [])
        assert cache.get("k", "miss") == []

    def test_entry_expires_after_ttl(self, cache, clock):
        cache.set("k", 1)
        clock.advance(299)
        assert cache.get("k") == 1
        clock.advance(1)
        assert cache.get("k") is None
        assert "k" not in cache

    def test_set_resets_expiry(self, cache, clock):
        cache.set("k", 1)
        clock.advance(200)
        cache.set("k", 2)
        clock.advance(200)
        assert cache.get("k") == 2

    def test_delete(self, cache):
        cache.set("k", 1)
        cache.delete("k")
        assert cache.get("k") is None

    def test_delete_missing_is_noop(self, cache):
        cache.delete("missing")
        assert len(cache) == 0

    def test_clear_all(self, cache):
        cache.set(list_cache_key(None, None, None), [])
        cache.set("detail:conv_1", {})
        cache.clear_all()
        assert len(cache) == 0
        assert cache.get("detail:conv_1") is None

    def test_len_ignores_expired_entries(self, cache, clock):
        cache.set("old", 1)
        clock.advance(250)
        cache.set("new", 2)
        clock.advance(100)
        assert len(cache) == 1

    def test_stats_count_hits_and_misses(self, clock):
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", 1)
        cache.get("k")
        cache.get("k")
        cache.get("other")
        stats = cache.stats()
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["entries"] == 1
        assert stats["ttl_seconds"] == 10
