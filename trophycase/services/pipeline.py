# trophycase/services/pipeline.py
import logging
from typing import Callable, Optional, Sequence

from trophycase.config import DEFAULT_MARGIN_H, DEFAULT_MARGIN_W
from trophycase.credentials import CredentialPool
from trophycase.errors import RenderFailure, TrophyCaseError, ValidationError
from trophycase.github_client import GithubClient
from trophycase.models import RenderKey, Subject, TrophyRequest
from trophycase.services import trophy
from trophycase.services.caches import RenderCache, StatsCache
from trophycase.services.svg import CardLayout, render_card
from trophycase.services.themes import THEME_NAMES, get_theme

# ---------- logging ----------
log = logging.getLogger("pipeline")
if not log.handlers:
  h = logging.StreamHandler()
  h.setFormatter(logging.Formatter("[PIPE] %(levelname)s: %(message)s"))
  log.addHandler(h)
  log.setLevel(logging.INFO)

Renderer = Callable[[str, Sequence[trophy.ComputedTrophy], str, CardLayout], str]


class Pipeline:
  def __init__(
      self,
      pool: CredentialPool,
      client: GithubClient,
      stats_cache: StatsCache,
      render_cache: RenderCache,
      *,
      renderer: Renderer = render_card,
  ):
    self.pool = pool
    self.client = client
    self.stats_cache = stats_cache
    self.render_cache = render_cache
    self.renderer = renderer

  async def resolve_subject(self, username: Optional[str]) -> Subject:
    login = (username or "").strip()
    if not login:
      if not self.pool.single_token_mode:
        raise ValidationError('"username" is a required query parameter')
      login = await self.pool.resolve_owner(self.client)

    owner = self.pool.owner
    include_private = bool(owner) and owner.lower() == login.lower()
    return Subject(login=login, include_private=include_private)

  async def render(self, req: TrophyRequest) -> str:
    theme = (req.theme or "").strip().lower()
    if get_theme(theme) is None:
      raise ValidationError(f"unknown theme '{req.theme}'; expected one of: {', '.join(THEME_NAMES)}")

    subject = await self.resolve_subject(req.username)
    key = RenderKey(
        subject=subject,
        titles=frozenset(t.strip() for t in req.title if t.strip()),
        ranks=frozenset(r.strip() for r in req.rank if r.strip()),
        row=req.row or None,
        column=req.column or None,
        theme=theme,
        margin_w=req.margin_w if req.margin_w is not None else DEFAULT_MARGIN_W,
        margin_h=req.margin_h if req.margin_h is not None else DEFAULT_MARGIN_H,
        no_bg=req.no_bg,
        no_frame=req.no_frame,
    )

    async def _compute() -> str:
      return await self._compute(key)

    return await self.render_cache.get_or_fetch(key, _compute)

  async def _compute(self, key: RenderKey) -> str:
    try:
      bundle = await self.stats_cache.get_or_fetch(key.subject)
    except TrophyCaseError as e:
      log.error("GitHub API error for username='%s': %s", key.subject.login, e.message)
      raise

    trophies = trophy.compute(bundle, key.titles, key.ranks, key.row, key.column)
    layout = CardLayout(
        row=key.row or 0,
        column=key.column or 0,
        margin_w=key.margin_w,
        margin_h=key.margin_h,
        no_bg=key.no_bg,
        no_frame=key.no_frame,
    )
    try:
      svg = self.renderer(key.subject.login, trophies, key.theme, layout)
    except Exception as e:
      log.error("render failed for username='%s': %s", key.subject.login, e)
      raise RenderFailure(f"could not render trophies for '{key.subject.login}'") from e
    if not svg:
      raise RenderFailure(f"renderer produced no output for '{key.subject.login}'")
    return svg
