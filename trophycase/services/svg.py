# trophycase/services/svg.py
import math
from dataclasses import dataclass
from html import escape
from typing import List, Sequence

from trophycase.config import DEFAULT_PANEL_SIZE
from trophycase.services.themes import Theme, get_theme
from trophycase.services.trophy import ComputedTrophy, Rank

FONT = "Segoe UI,Helvetica,Arial,sans-serif,Apple Color Emoji,Segoe UI Emoji"


@dataclass(frozen=True)
class CardLayout:
  row: int = 0          # 0 = as many rows as needed
  column: int = 0       # 0 = everything on one row
  margin_w: int = 0
  margin_h: int = 0
  no_bg: bool = False
  no_frame: bool = False
  panel_size: int = DEFAULT_PANEL_SIZE


def _grid(count: int, layout: CardLayout) -> tuple[int, int]:
  columns = layout.column if layout.column > 0 else max(1, count)
  rows = max(1, math.ceil(count / columns)) if count else 1
  if layout.row > 0:
    rows = min(rows, layout.row)
  return columns, rows


def _stops(c0: str, c1: str, c2: str, mid: int = 70) -> str:
  return (
    f'<stop offset="0%" stop-color="{c0}"/>'
    f'<stop offset="{mid}%" stop-color="{c1}"/>'
    f'<stop offset="100%" stop-color="{c2}"/>'
  )


def _laurel(color: str) -> str:
  return (
    f'<g fill="{color}" opacity="0.8">'
    '<path d="M30 88c-9-6-14-17-13-29 4 10 9 19 17 25z"/>'
    '<path d="M80 88c9-6 14-17 13-29-4 10-9 19-17 25z"/>'
    '</g>'
  )


def _cup(circle: str, letter: str, letter_color: str) -> str:
  return (
    '<path d="M7 10h2v4H7v-4z"/>'
    '<path d="M10 11c0 .552-.895 1-2 1s-2-.448-2-1 .895-1 2-1 2 .448 2 1z"/>'
    '<path fill-rule="evenodd" d="M12.5 3a2 2 0 1 0 0 4 2 2 0 0 0 0-4zm-3 2a3 3 0 1 1 6 0 3 3 0 0 1-6 0zm-6-2a2 2 0 1 0 0 4 2 2 0 0 0 0-4zm-3 2a3 3 0 1 1 6 0 3 3 0 0 1-6 0z"/>'
    '<path d="M3 1h10c-.495 3.467-.5 10-5 10S3.495 4.467 3 1zm0 15a1 1 0 0 1 1-1h8a1 1 0 0 1 1 1H3zm2-1a1 1 0 0 1 1-1h4a1 1 0 0 1 1 1H5z"/>'
    f'<circle cx="8" cy="6" r="4" fill="{circle}"/>'
    f'<text x="6" y="8" font-family="Courier, Monospace" font-size="7" fill="{letter_color}">{letter}</text>'
  )


def _trophy_icon(theme: Theme, rank: Rank, uid: str) -> str:
  """Cup with rank-coloured gradient; S/A ranks get laurels, SS/AA.. get small cups."""
  color, text = theme.default_rank_base, theme.default_rank_text
  background = ""
  stops = _stops(theme.default_rank_base, theme.default_rank_base, theme.default_rank_shadow, 50)

  if rank is Rank.SECRET:
    text = theme.secret_rank_text
    stops = _stops(theme.secret_rank_1, theme.secret_rank_2, theme.secret_rank_3, 50)
  elif rank.first_letter == "S":
    color, text = theme.s_rank_base, theme.s_rank_text
    background = _laurel(theme.laurel)
    stops = _stops(color, color, theme.s_rank_shadow)
  elif rank.first_letter == "A":
    color, text = theme.a_rank_base, theme.a_rank_text
    background = _laurel(theme.laurel)
    stops = _stops(color, color, theme.a_rank_shadow)
  elif rank is Rank.B:
    color, text = theme.b_rank_base, theme.b_rank_text
    stops = _stops(color, color, theme.b_rank_shadow)

  cup = _cup(theme.icon_circle, rank.first_letter, text)

  small = ""
  extra = len(rank.value) - 1 if rank is not Rank.SECRET else 0
  for x in ((68,) if extra == 1 else (7, 68) if extra == 2 else ()):
    small += (
      f'<svg x="{x}" y="35" width="65" height="65" viewBox="0 0 30 30" fill="{color}" '
      f'xmlns="http://www.w3.org/2000/svg">{cup}</svg>'
    )

  return (
    f"{background}{small}"
    f'<defs><linearGradient id="{uid}-grad" gradientTransform="rotate(45)">{stops}</linearGradient></defs>'
    f'<svg x="28" y="20" width="100" height="100" viewBox="0 0 30 30" fill="url(#{uid}-grad)" '
    f'xmlns="http://www.w3.org/2000/svg">{cup}</svg>'
  )


def _progress_bar(uid: str, progress: float, color: str) -> str:
  max_width = 80.0
  width = max_width * max(0.0, min(1.0, progress))
  return (
    f"<style>@keyframes {uid}RankAnimation {{ from {{ width: 0px; }} to {{ width: {width:.1f}px; }} }}"
    f" #{uid}-rank-progress {{ animation: {uid}RankAnimation 1s forwards ease-in-out; }}</style>"
    f'<rect x="15" y="101" rx="1" width="{max_width:.0f}" height="3.2" opacity="0.3" fill="{color}"/>'
    f'<rect id="{uid}-rank-progress" x="15" y="101" rx="1" height="3.2" fill="{color}"/>'
  )


def _panel(trophy: ComputedTrophy, theme: Theme, x: int, y: int, layout: CardLayout) -> str:
  size = layout.panel_size
  uid = escape(trophy.id)
  return (
    f'<svg x="{x}" y="{y}" width="{size}" height="{size}" viewBox="0 0 {size} {size}" '
    f'fill="none" xmlns="http://www.w3.org/2000/svg">'
    f'<rect x="0.5" y="0.5" rx="4.5" width="{size - 1}" height="{size - 1}" stroke="#e1e4e8" '
    f'fill="{theme.background}" stroke-opacity="{0 if layout.no_frame else 1}" '
    f'fill-opacity="{0 if layout.no_bg else 1}"/>'
    f"{_trophy_icon(theme, trophy.rank, uid)}"
    f'<text x="50%" y="18" text-anchor="middle" font-family="{FONT}" font-weight="bold" '
    f'font-size="13" fill="{theme.title}">{escape(trophy.id)}</text>'
    f'<text x="50%" y="85" text-anchor="middle" font-family="{FONT}" font-weight="bold" '
    f'font-size="10.5" fill="{theme.text}">{escape(trophy.top_message)}</text>'
    f'<text x="50%" y="97" text-anchor="middle" font-family="{FONT}" font-weight="bold" '
    f'font-size="10" fill="{theme.text}">{escape(trophy.bottom_message)}</text>'
    f"{_progress_bar(uid, trophy.progress, theme.next_rank_bar)}"
    "</svg>"
  )


def render_card(display_name: str, trophies: Sequence[ComputedTrophy], theme_id: str, layout: CardLayout) -> str:
  theme = get_theme(theme_id)
  if theme is None:
    raise ValueError(f"unknown theme '{theme_id}'")

  columns, rows = _grid(len(trophies), layout)
  size = layout.panel_size
  width = size * columns + layout.margin_w * (columns - 1)
  height = size * rows + layout.margin_h * (rows - 1)

  panels: List[str] = []
  for i, trophy in enumerate(trophies[: columns * rows]):
    col, row = i % columns, i // columns
    x = size * col + layout.margin_w * col
    y = size * row + layout.margin_h * row
    panels.append(_panel(trophy, theme, x, y, layout))

  return (
    f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" fill="none" '
    f'xmlns="http://www.w3.org/2000/svg" role="img" aria-label="{escape(display_name)} trophies">'
    f"<title>{escape(display_name)}</title>"
    f'{"".join(panels)}'
    "</svg>"
  )
