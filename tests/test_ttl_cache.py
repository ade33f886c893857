import time

from intentplanner.ttl_cache import TTLCache


def test_put_for_success():
    with TTLCache(10, 100) as cache:
        cache.put("foo")
        assert cache.is_in("foo") is True


def test_is_in_for_success():
    with TTLCache(10, 100) as cache:
        cache.put("foo")
        assert "foo" in cache
        assert "bar" not in cache


def test_put_for_sanity():
    with TTLCache(10, 50) as cache:
        cache.put("foo")
        assert cache.is_in("foo") is True
        time.sleep(0.2)
        assert cache.is_in("foo") is False


def test_invalid_timing_never_evicts():
    with TTLCache(0, 50) as cache:
        assert cache.evicting is False
        cache.put("foo")
        time.sleep(0.1)
        assert cache.is_in("foo") is True


def test_tick_above_limit_is_invalid():
    with TTLCache(10, 50001) as cache:
        assert cache.evicting is False


def test_close_stops_eviction():
    cache = TTLCache(10, 20)
    assert cache.evicting is True
    cache.close()
    assert cache.evicting is False
    cache.put("foo")
    time.sleep(0.1)
    assert cache.is_in("foo") is True


def test_long_ttl_keeps_entry():
    with TTLCache(10000, 20) as cache:
        cache.put("foo")
        time.sleep(0.1)
        assert cache.is_in("foo") is True