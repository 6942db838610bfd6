# trophycase/util/ttl_cache.py
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Set, Tuple


class CoalescingTTLCache:
  """
  In-memory TTL cache with in-flight coalescing:
    - entries are served only while now < expires_at,
    - one fetch per key at a time; concurrent misses await the same task,
    - failures are propagated to every joined waiter and never cached,
    - a waiter being cancelled never cancels the fetch.
  """

  def __init__(self, ttl: float, *, max_entries: int = 20_000, clock: Callable[[], float] = time.monotonic):
    self.ttl = ttl
    self.max_entries = max_entries
    self._clock = clock
    self._m: Dict[Hashable, Tuple[float, Any]] = {}
    self._inflight: Dict[Hashable, asyncio.Task] = {}
    self._tasks: Set[asyncio.Task] = set()

  def __len__(self) -> int:
    return len(self._m)

  def get(self, k: Hashable) -> Any | None:
    v = self._m.get(k)
    if not v:
      return None
    exp, payload = v
    if self._clock() >= exp:
      self._m.pop(k, None)
      return None
    return payload

  def put(self, k: Hashable, payload: Any) -> None:
    if k not in self._m and len(self._m) >= self.max_entries:
      self.sweep()
      # still full: drop the entry closest to expiry
      if len(self._m) >= self.max_entries:
        oldest = min(self._m.items(), key=lambda kv: kv[1][0])[0]
        self._m.pop(oldest, None)
    self._m[k] = (self._clock() + self.ttl, payload)

  def sweep(self) -> int:
    now = self._clock()
    dead = [k for k, (exp, _) in self._m.items() if now >= exp]
    for k in dead:
      self._m.pop(k, None)
    return len(dead)

  def inflight(self, k: Hashable) -> Optional[asyncio.Task]:
    return self._inflight.get(k)

  async def get_or_fetch(self, k: Hashable, fetch: Callable[[], Awaitable[Any]]) -> Any:
    hit = self.get(k)
    if hit is not None:
      return hit

    # check-and-register happens without yielding to the loop
    task = self._inflight.get(k)
    if task is None:
      task = asyncio.get_running_loop().create_task(self._fill(k, fetch))
      self._inflight[k] = task
      self._tasks.add(task)
      task.add_done_callback(self._reap)

    return await asyncio.shield(task)

  async def _fill(self, k: Hashable, fetch: Callable[[], Awaitable[Any]]) -> Any:
    me = asyncio.current_task()
    try:
      value = await fetch()
      self.put(k, value)
      return value
    finally:
      if self._inflight.get(k) is me:
        self._inflight.pop(k, None)

  def _reap(self, task: asyncio.Task) -> None:
    self._tasks.discard(task)
    # mark the exception retrieved when every waiter has gone away
    if not task.cancelled():
      task.exception()
