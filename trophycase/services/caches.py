# trophycase/services/caches.py
import time
from typing import Awaitable, Callable

from trophycase.config import CACHE_MAX_ENTRIES, SVG_CACHE_TTL_SECS, USER_CACHE_TTL_SECS
from trophycase.credentials import CredentialPool
from trophycase.models import RawStatsBundle, RenderKey, Subject
from trophycase.services.aggregator import ParallelAggregator
from trophycase.util.ttl_cache import CoalescingTTLCache


class StatsCache:
  """Subject -> RawStatsBundle, 4h lifetime, one aggregation per subject at a time."""

  def __init__(
      self,
      pool: CredentialPool,
      aggregator: ParallelAggregator,
      *,
      ttl: float = USER_CACHE_TTL_SECS,
      max_entries: int = CACHE_MAX_ENTRIES,
      clock: Callable[[], float] = time.monotonic,
  ):
    self.pool = pool
    self.aggregator = aggregator
    self._cache = CoalescingTTLCache(ttl, max_entries=max_entries, clock=clock)

  def __len__(self) -> int:
    return len(self._cache)

  async def get_or_fetch(self, subject: Subject) -> RawStatsBundle:
    async def _fetch() -> RawStatsBundle:
      return await self.aggregator.aggregate(subject, self.pool.acquire())

    return await self._cache.get_or_fetch(subject, _fetch)


class RenderCache:
  """RenderKey -> finished SVG text, 1h lifetime."""

  def __init__(
      self,
      *,
      ttl: float = SVG_CACHE_TTL_SECS,
      max_entries: int = CACHE_MAX_ENTRIES,
      clock: Callable[[], float] = time.monotonic,
  ):
    self._cache = CoalescingTTLCache(ttl, max_entries=max_entries, clock=clock)

  def __len__(self) -> int:
    return len(self._cache)

  async def get_or_fetch(self, key: RenderKey, compute: Callable[[], Awaitable[str]]) -> str:
    return await self._cache.get_or_fetch(key, compute)
