# trophycase/util/backoff.py
import random


class ConstantBackoff:
  def __init__(self, delay: float = 0.5):
    self.delay_secs = delay

  def delay(self, attempt: int) -> float:
    return self.delay_secs


class ExponentialBackoff:
  """base * 2^(attempt-1), capped, with full jitter over the upper half."""

  def __init__(self, base: float = 0.5, cap: float = 8.0, jitter: bool = True, rng: random.Random | None = None):
    self.base = base
    self.cap = cap
    self.jitter = jitter
    self._rng = rng or random.Random()

  def delay(self, attempt: int) -> float:
    d = min(self.cap, self.base * (2 ** max(0, attempt - 1)))
    if self.jitter:
      d = d / 2 + self._rng.uniform(0, d / 2)
    return d
