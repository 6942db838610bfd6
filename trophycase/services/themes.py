# trophycase/services/themes.py
from dataclasses import dataclass, replace
from typing import Dict


@dataclass(frozen=True)
class Theme:
  background: str = "#FFF"
  title: str = "#000"
  icon_circle: str = "#FFF"
  text: str = "#666"
  laurel: str = "#09D909"
  secret_rank_1: str = "red"
  secret_rank_2: str = "fuchsia"
  secret_rank_3: str = "blue"
  secret_rank_text: str = "fuchsia"
  next_rank_bar: str = "#0366d6"
  s_rank_base: str = "#FAD200"
  s_rank_shadow: str = "#C8A090"
  s_rank_text: str = "#886000"
  a_rank_base: str = "#B0B0B0"
  a_rank_shadow: str = "#9090C0"
  a_rank_text: str = "#505050"
  b_rank_base: str = "#A18D66"
  b_rank_shadow: str = "#816D96"
  b_rank_text: str = "#412D06"
  default_rank_base: str = "#777"
  default_rank_shadow: str = "#333"
  default_rank_text: str = "#333"


_DEFAULT = Theme()

THEMES: Dict[str, Theme] = {
  "default": _DEFAULT,
  "flat": replace(_DEFAULT, background="#FFF", title="#000", text="#666", icon_circle="#FFF", laurel="#09D909"),
  "onedark": replace(
    _DEFAULT, background="#282c34", title="#e5c07b", icon_circle="#abb2bf", text="#abb2bf",
    laurel="#98c379", next_rank_bar="#e5c07b", secret_rank_text="#c678dd",
  ),
  "gruvbox": replace(
    _DEFAULT, background="#282828", title="#fabd2f", icon_circle="#ebdbb2", text="#8ec07c",
    laurel="#b8bb26", next_rank_bar="#fe8019",
  ),
  "dracula": replace(
    _DEFAULT, background="#282a36", title="#ff79c6", icon_circle="#f8f8f2", text="#f8f8f2",
    laurel="#50fa7b", next_rank_bar="#bd93f9", secret_rank_text="#bd93f9",
  ),
  "monokai": replace(
    _DEFAULT, background="#272822", title="#f92672", icon_circle="#f8f8f2", text="#f8f8f2",
    laurel="#a6e22e", next_rank_bar="#66d9ef",
  ),
  "nord": replace(
    _DEFAULT, background="#2e3440", title="#88c0d0", icon_circle="#eceff4", text="#d8dee9",
    laurel="#a3be8c", next_rank_bar="#81a1c1",
  ),
  "darkhub": replace(
    _DEFAULT, background="#0d1117", title="#c9d1d9", icon_circle="#c9d1d9", text="#8b949e",
    laurel="#3fb950", next_rank_bar="#58a6ff",
  ),
  "radical": replace(
    _DEFAULT, background="#141321", title="#fe428e", icon_circle="#a9fef7", text="#a9fef7",
    laurel="#f8d847", next_rank_bar="#fe428e",
  ),
  "tokyonight": replace(
    _DEFAULT, background="#1a1b27", title="#70a5fd", icon_circle="#38bdae", text="#38bdae",
    laurel="#bf91f3", next_rank_bar="#70a5fd",
  ),
}

THEME_NAMES = tuple(THEMES.keys())


def get_theme(name: str) -> Theme | None:
  return THEMES.get((name or "").strip().lower())
