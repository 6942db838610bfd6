# trophycase/services/aggregator.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from trophycase.config import RATE_LIMIT_MAX_WAIT_SECS, RETRY_BASE_DELAY_SECS, RETRY_MAX_ATTEMPTS
from trophycase.credentials import Credential
from trophycase.errors import UpstreamError, UpstreamRateLimited
from trophycase.github_client import Facet, GithubClient
from trophycase.models import RawStatsBundle, Subject
from trophycase.util.backoff import ExponentialBackoff

log = logging.getLogger("aggregator")
if not log.handlers:
  h = logging.StreamHandler()
  h.setFormatter(logging.Formatter("[AGG] %(levelname)s: %(message)s"))
  log.addHandler(h)
  log.setLevel(logging.INFO)


class ParallelAggregator:
  """
  Runs the four facet queries for one subject concurrently with one credential
  and joins them into a RawStatsBundle. Any facet failing (after its own
  retries) fails the whole aggregation; siblings are cancelled.
  """

  def __init__(
      self,
      client: GithubClient,
      *,
      max_attempts: int = RETRY_MAX_ATTEMPTS,
      backoff=None,
      max_rate_limit_wait: float = RATE_LIMIT_MAX_WAIT_SECS,
      sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
      now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
  ):
    self.client = client
    self.max_attempts = max(1, max_attempts)
    self.backoff = backoff or ExponentialBackoff(base=RETRY_BASE_DELAY_SECS)
    self.max_rate_limit_wait = max_rate_limit_wait
    self._sleep = sleep
    self._now = now

  async def aggregate(self, subject: Subject, credential: Credential) -> RawStatsBundle:
    tasks = {
      kind: asyncio.ensure_future(self._fetch_facet(kind, subject, credential))
      for kind in Facet
    }
    try:
      await asyncio.gather(*tasks.values())
    except BaseException:
      for t in tasks.values():
        t.cancel()
      raise

    return RawStatsBundle.from_parts(
        tasks[Facet.ACTIVITY].result(),
        tasks[Facet.ISSUE].result(),
        tasks[Facet.PULL_REQUEST].result(),
        tasks[Facet.REPOSITORY].result(),
        now=self._now(),
    )

  async def _fetch_facet(self, kind: Facet, subject: Subject, credential: Credential) -> BaseModel:
    attempt = 0
    while True:
      attempt += 1
      try:
        return await self.client.fetch(kind, subject, credential)
      except UpstreamError as e:
        if not e.retryable or attempt >= self.max_attempts:
          raise
        delay = self._retry_delay(e, attempt)
        if delay is None:
          raise
        log.info("retrying %s for '%s' in %.2fs (attempt %d/%d): %s",
                 kind.value, subject.login, delay, attempt + 1, self.max_attempts, e.message)
        await self._sleep(delay)

  def _retry_delay(self, e: UpstreamError, attempt: int) -> Optional[float]:
    if isinstance(e, UpstreamRateLimited) and e.retry_after is not None:
      if e.retry_after > self.max_rate_limit_wait:
        return None
      return e.retry_after
    return self.backoff.delay(attempt)
