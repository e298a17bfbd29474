from datetime import datetime, timedelta, timezone

from picaloco_docs.services.spec_cache import SpecCache


def test_empty_cache(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)

    assert cache.get() is None
    assert cache.entry is None
    assert cache.age() is None
    assert cache.is_fresh(timedelta(minutes=5)) is False
    assert cache.get_fresh(timedelta(minutes=5)) is None


def test_put_stamps_clock_time(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    doc = {"paths": {}}

    entry = cache.put(doc)

    assert entry.fetched_at == clock.now
    assert cache.get() is doc
    assert cache.entry is entry


def test_fresh_immediately_after_put(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    cache.put({"paths": {}})

    assert cache.is_fresh(timedelta(microseconds=1))
    assert cache.is_fresh(timedelta(minutes=5))


def test_stale_after_max_age(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    cache.put({"paths": {}})

    clock.advance(299)
    assert cache.is_fresh(timedelta(minutes=5))

    clock.advance(1)
    assert not cache.is_fresh(timedelta(minutes=5))
    # stale entries are still readable for fallback
    assert cache.get() == {"paths": {}}


def test_get_fresh_returns_same_object(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    doc = {"paths": {"/a": {}}}
    cache.put(doc)

    assert cache.get_fresh(timedelta(minutes=5)) is doc

    clock.advance(600)
    assert cache.get_fresh(timedelta(minutes=5)) is None


def test_put_replaces_whole_entry(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    first = cache.put({"version": 1})
    clock.advance(10)

    second = cache.put({"version": 2})

    assert first.document == {"version": 1}
    assert second.document == {"version": 2}
    assert cache.entry is second
    assert cache.age() == timedelta(0)


def test_wall_clock_step_back_does_not_extend_freshness(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    entry = cache.put({"paths": {}})

    clock.advance(301)
    clock.step_wall(-3600)

    assert not cache.is_fresh(timedelta(minutes=5))
    assert cache.get_fresh(timedelta(minutes=5)) is None
    # display time is still the wall-clock moment of the put
    assert entry.fetched_at == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_age_tracks_monotonic_clock(clock):
    cache = SpecCache(clock=clock, wall_clock=clock.wall)
    cache.put({"paths": {}})

    clock.step_wall(7200)
    clock.advance(42)

    assert cache.age() == timedelta(seconds=42)
