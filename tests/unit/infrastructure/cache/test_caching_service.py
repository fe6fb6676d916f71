import pytest
from pathlib import Path

from sagecli.domain.models.common import CacheKey
from sagecli.infrastructure.cache.caching_service import CachingServiceImpl, build_cache_key


@pytest.fixture
def memory_cache(fake_clock):
    """Cache with only the in-memory level."""
    return CachingServiceImpl(default_ttl=60, clock=fake_clock)

@pytest.fixture
def file_cache(tmp_path: Path, fake_clock):
    return CachingServiceImpl(default_ttl=60, l2_dir=tmp_path / "cache", clock=fake_clock)

def test_get_missing_key_returns_none(memory_cache):
    assert memory_cache.get(CacheKey("nothing_here")) is None

def test_value_is_returned_before_expiry(memory_cache, fake_clock):
    key = CacheKey("quiz_logical")
    memory_cache.set(key, [{"question": "2+2?"}], ttl=3600)

    fake_clock.advance(10)
    assert memory_cache.get(key) == [{"question": "2+2?"}]

def test_value_at_exact_expiry_is_still_valid(memory_cache, fake_clock):
    key = CacheKey("advice")
    memory_cache.set(key, "Ship small things.", ttl=30)

    fake_clock.advance(30)
    assert memory_cache.get(key) == "Ship small things."

def test_expired_entry_is_evicted_on_read(memory_cache, fake_clock):
    key = CacheKey("news_ai")
    memory_cache.set(key, ["headline"], ttl=1800)

    fake_clock.advance(1801)
    assert memory_cache.get(key) is None
    assert key not in memory_cache.l1_cache

def test_set_overwrites_value_and_expiry(memory_cache, fake_clock):
    key = CacheKey("motivation_English")
    memory_cache.set(key, "old", ttl=10)
    fake_clock.advance(5)
    memory_cache.set(key, "new", ttl=100)

    fake_clock.advance(50)
    assert memory_cache.get(key) == "new"

def test_default_ttl_is_used_without_explicit_ttl(memory_cache, fake_clock):
    key = CacheKey("roadmap_cli")
    memory_cache.set(key, {"phases": []})

    fake_clock.advance(59)
    assert memory_cache.get(key) == {"phases": []}
    fake_clock.advance(2)
    assert memory_cache.get(key) is None

def test_falsy_values_are_cached(memory_cache):
    memory_cache.set(CacheKey("empty_list"), [], ttl=60)
    assert memory_cache.get(CacheKey("empty_list")) == []

def test_l1_overflow_drops_oldest(fake_clock):
    cache = CachingServiceImpl(l1_max_items=2, clock=fake_clock)
    for name in ("a", "b", "c"):
        cache.set(CacheKey(name), name, ttl=60)

    assert cache.get(CacheKey("a")) is None
    assert cache.get(CacheKey("b")) == "b"
    assert cache.get(CacheKey("c")) == "c"

def test_delete_removes_entry(file_cache):
    key = CacheKey("jobs_dev")
    file_cache.set(key, ["job"], ttl=60)
    file_cache.delete(key)

    assert file_cache.get(key) is None

def test_l2_survives_a_new_instance(tmp_path: Path, fake_clock):
    l2_dir = tmp_path / "cache"
    first = CachingServiceImpl(l2_dir=l2_dir, clock=fake_clock)
    first.set(CacheKey("careers_python"), [{"title": "Backend Engineer"}], ttl=86400)

    second = CachingServiceImpl(l2_dir=l2_dir, clock=fake_clock)
    assert second.get(CacheKey("careers_python")) == [{"title": "Backend Engineer"}]
    # Promoted into memory with the original expiry
    assert CacheKey("careers_python") in second.l1_cache

def test_l2_entry_expires_and_file_is_removed(tmp_path: Path, fake_clock):
    l2_dir = tmp_path / "cache"
    first = CachingServiceImpl(l2_dir=l2_dir, clock=fake_clock)
    key = CacheKey("problems_graphs")
    first.set(key, ["p1"], ttl=100)
    l2_file = first._get_l2_filepath(key)
    assert l2_file.exists()

    fake_clock.advance(101)
    second = CachingServiceImpl(l2_dir=l2_dir, clock=fake_clock)
    assert second.get(key) is None
    assert not l2_file.exists()

def test_corrupt_l2_file_is_treated_as_miss(file_cache):
    key = CacheKey("broken")
    file_cache.set(key, "value", ttl=60)
    file_cache.l1_cache.clear()
    file_cache._get_l2_filepath(key).write_bytes(b"")

    assert file_cache.get(key) is None
    assert not file_cache._get_l2_filepath(key).exists()

@pytest.mark.parametrize("level, l1_empty, l2_empty", [
    ("l1", True, False),
    ("l2", False, True),
    ("all", True, True),
])
def test_clear_levels(file_cache, level, l1_empty, l2_empty):
    key = CacheKey("resources_rust")
    file_cache.set(key, ["book"], ttl=60)

    file_cache.clear(level)

    assert (key not in file_cache.l1_cache) is l1_empty
    assert (not file_cache._get_l2_filepath(key).exists()) is l2_empty
    assert file_cache.l2_dir.is_dir()

def test_clear_rejects_unknown_level(memory_cache):
    with pytest.raises(ValueError, match="Invalid cache level"):
        memory_cache.clear("l3")

def test_build_cache_key_sorts_collections():
    assert build_cache_key("careers", ["sql", "python"], "English") == "careers_python_sql_English"
    assert build_cache_key("careers", ["python", "sql"], "English") == build_cache_key("careers", ["sql", "python"], "English")

def test_build_cache_key_keeps_scalar_order():
    assert build_cache_key("jobs", "Developer", "Remote", "Entry", []) == "jobs_Developer_Remote_Entry_"
