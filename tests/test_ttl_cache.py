"""Single-flight TTL cache, tested without any networking."""

import asyncio

import pytest

from conftest import FakeClock
from trophycase.util.ttl_cache import CoalescingTTLCache


class Boom(Exception):
  pass


def gated_fetch(gate: asyncio.Event, value="v", exc: Exception | None = None):
  calls = {"n": 0}

  async def fetch():
    calls["n"] += 1
    await gate.wait()
    if exc is not None:
      raise exc
    return value

  return fetch, calls


class TestCoalescing:

  @pytest.mark.asyncio
  async def test_concurrent_misses_share_one_fetch(self):
    cache = CoalescingTTLCache(60)
    gate = asyncio.Event()
    fetch, calls = gated_fetch(gate, value={"answer": 42})

    tasks = [asyncio.create_task(cache.get_or_fetch("k", fetch)) for _ in range(10)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks)

    assert calls["n"] == 1
    assert all(r is results[0] for r in results)
    assert cache.inflight("k") is None

  @pytest.mark.asyncio
  async def test_failure_reaches_every_waiter_and_is_not_cached(self):
    cache = CoalescingTTLCache(60)
    gate = asyncio.Event()
    err = Boom("upstream down")
    fetch, calls = gated_fetch(gate, exc=err)

    tasks = [asyncio.create_task(cache.get_or_fetch("k", fetch)) for _ in range(5)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert calls["n"] == 1
    assert all(r is err for r in results)
    assert cache.get("k") is None
    assert cache.inflight("k") is None

    ok = asyncio.Event()
    ok.set()
    retry, retry_calls = gated_fetch(ok, value="fresh")
    assert await cache.get_or_fetch("k", retry) == "fresh"
    assert retry_calls["n"] == 1

  @pytest.mark.asyncio
  async def test_distinct_keys_fetch_independently(self):
    cache = CoalescingTTLCache(60)
    gate = asyncio.Event()
    gate.set()
    fetch, calls = gated_fetch(gate)

    await asyncio.gather(cache.get_or_fetch("a", fetch), cache.get_or_fetch("b", fetch))
    assert calls["n"] == 2

  @pytest.mark.asyncio
  async def test_cancelled_waiter_does_not_cancel_fetch(self):
    cache = CoalescingTTLCache(60)
    gate = asyncio.Event()
    fetch, calls = gated_fetch(gate, value="kept")

    waiter = asyncio.create_task(cache.get_or_fetch("k", fetch))
    await asyncio.sleep(0)
    handle = cache.inflight("k")
    assert handle is not None

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
      await waiter

    gate.set()
    assert await handle == "kept"
    assert cache.get("k") == "kept"
    assert calls["n"] == 1


class TestExpiry:

  @pytest.mark.asyncio
  async def test_entry_served_until_expiry(self):
    clock = FakeClock()
    cache = CoalescingTTLCache(100, clock=clock)
    gate = asyncio.Event()
    gate.set()
    fetch, calls = gated_fetch(gate)

    await cache.get_or_fetch("k", fetch)
    clock.advance(99)
    await cache.get_or_fetch("k", fetch)
    assert calls["n"] == 1

    clock.advance(1)
    assert cache.get("k") is None
    await cache.get_or_fetch("k", fetch)
    assert calls["n"] == 2

  def test_sweep_reclaims_expired_entries(self):
    clock = FakeClock()
    cache = CoalescingTTLCache(10, clock=clock)
    cache.put("a", 1)
    cache.put("b", 2)
    clock.advance(11)
    cache.put("c", 3)

    assert cache.sweep() == 2
    assert len(cache) == 1
    assert cache.get("c") == 3

  def test_capacity_drops_entry_closest_to_expiry(self):
    clock = FakeClock()
    cache = CoalescingTTLCache(10, max_entries=2, clock=clock)
    cache.put("a", 1)
    clock.advance(1)
    cache.put("b", 2)
    clock.advance(1)
    cache.put("c", 3)

    assert len(cache) == 2
    assert cache.get("a") is None
    assert cache.get("b") == 2 and cache.get("c") == 3
