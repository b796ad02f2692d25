"""
Tests for the cache module
"""
import pytest

from quadworld.cache import BoundedCache


def test_cache_bound():
    """Test that inserting past capacity evicts the least recently used entry"""
    cache = BoundedCache(3)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    # Touch "a" so "b" becomes the oldest
    assert cache.get("a") == 1
    cache.set("d", 4)

    assert len(cache) == 3
    assert "b" not in cache
    assert "a" in cache and "c" in cache and "d" in cache
    assert list(cache.keys()) == ["c", "a", "d"]


def test_cache_miss():
    """Test lookups of missing keys"""
    cache = BoundedCache(2)
    assert cache.get("missing") is None
    assert cache.get("missing", 7) == 7
    with pytest.raises(KeyError):
        cache["missing"]


def test_cache_replace():
    """Test that replacing an entry doesn't use more room"""
    cache = BoundedCache(2)
    cache["a"] = 1
    cache["b"] = 2
    cache["a"] = 10

    assert len(cache) == 2
    assert cache["a"] == 10

    # "b" is now the oldest
    cache["c"] = 3
    assert "b" not in cache


def test_cache_clear():
    """Test emptying the cache"""
    cache = BoundedCache(2)
    cache.set((1, 2), "tuple keys work too")
    cache.clear()
    assert len(cache) == 0


def test_cache_capacity_must_be_positive():
    """Test that an unusable capacity is rejected"""
    with pytest.raises(ValueError):
        BoundedCache(0)
