# trophycase/routes/trophy.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from trophycase.config import (
  CACHE_MAX_AGE,
  CDN_CACHE_MAX_AGE,
  DEFAULT_MARGIN_H,
  DEFAULT_MARGIN_W,
  DEFAULT_MAX_COLUMN,
  DEFAULT_MAX_ROW,
  DEFAULT_THEME,
  STALE_WHILE_REVALIDATE,
)
from trophycase.errors import TrophyCaseError
from trophycase.models import TrophyRequest
from trophycase.services.pipeline import Pipeline
from trophycase.util.html import error_page, missing_username_page

router = APIRouter(tags=["trophy"])

CACHE_CONTROL = (
  f"public, max-age={CACHE_MAX_AGE}, s-maxage={CDN_CACHE_MAX_AGE}, "
  f"stale-while-revalidate={STALE_WHILE_REVALIDATE}"
)


def get_pipeline(request: Request) -> Pipeline:
  return request.app.state.pipeline


# ----------------------------
# Query helpers (lenient: bad values fall back to defaults)
# ----------------------------
_I32_MIN, _I32_MAX = -(2 ** 31), 2 ** 31 - 1


def _number(raw: Optional[str], default: int) -> int:
  try:
    n = int(raw) if raw is not None else default
  except ValueError:
    return default
  # out-of-range values are treated like unparsable ones
  return n if _I32_MIN <= n <= _I32_MAX else default


def _flag(raw: Optional[str]) -> bool:
  return raw == "true"


def _csv(values: List[str]) -> List[str]:
  return [p.strip() for v in values for p in v.split(",") if p.strip()]


def parse_trophy_request(request: Request) -> TrophyRequest:
  q = request.query_params
  row = max(1, _number(q.get("row"), DEFAULT_MAX_ROW))
  column = _number(q.get("column"), DEFAULT_MAX_COLUMN)
  if column == -1:
    column = 0  # fit every trophy on one row
  elif column < 1:
    column = DEFAULT_MAX_COLUMN

  return TrophyRequest(
      username=q.get("username") or None,
      title=_csv(q.getlist("title")),
      rank=_csv(q.getlist("rank")),
      row=row,
      column=column,
      theme=q.get("theme") or DEFAULT_THEME,
      margin_w=max(0, _number(q.get("margin-w"), DEFAULT_MARGIN_W)),
      margin_h=max(0, _number(q.get("margin-h"), DEFAULT_MARGIN_H)),
      no_bg=_flag(q.get("no-bg")),
      no_frame=_flag(q.get("no-frame")),
  )


def _html(status: int, body: str) -> HTMLResponse:
  return HTMLResponse(body, status_code=status, headers={"Cache-Control": CACHE_CONTROL})


async def trophy_error_handler(request: Request, exc: TrophyCaseError) -> HTMLResponse:
  return _html(exc.status_code, error_page(exc))


@router.get("/")
async def trophies(request: Request, pipeline: Pipeline = Depends(get_pipeline)):
  """
  Example:
    /?username=octocat&theme=onedark&title=Stars,Followers&rank=-C&column=4
  """
  req = parse_trophy_request(request)
  if not req.username and not pipeline.pool.single_token_mode:
    return _html(400, missing_username_page(request.url.path))

  svg = await pipeline.render(req)
  return Response(svg, media_type="image/svg+xml", headers={"Cache-Control": CACHE_CONTROL})


@router.get("/healthz", response_class=PlainTextResponse)
async def healthz():
  return "ok"
