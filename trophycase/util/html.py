# trophycase/util/html.py
from html import escape

from trophycase.errors import TrophyCaseError
from trophycase.services.themes import THEME_NAMES

_STYLE = """
    body { font-family: Arial, sans-serif; margin: 0; background: #f4f4f4; color: #222; }
    section { width: min(860px, 92vw); margin: 24px auto; }
    .card { background: #fff; border-radius: 8px; padding: 20px; margin-bottom: 16px; box-shadow: 0 4px 24px rgba(0, 0, 0, 0.08); }
    code { background: #f0f0f0; padding: 2px 6px; border-radius: 4px; }
    input { width: 100%; box-sizing: border-box; padding: 10px 12px; margin: 8px 0 16px; border: 1px solid #d0d7de; border-radius: 6px; }
    button { padding: 10px 14px; border: none; border-radius: 6px; background: #24292f; color: #fff; cursor: pointer; }
    .muted { color: #57606a; font-size: 14px; }
"""


def _page(body: str) -> str:
  return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>GitHub Profile Trophy</title>
  <style>{_STYLE}</style>
</head>
<body>
  <section>
{body}
  </section>
</body>
</html>"""


def missing_username_page(base_path: str) -> str:
  path = escape(base_path or "/")
  themes = ", ".join(THEME_NAMES)
  return _page(f"""    <div class="card">
      <h2>"username" is a required query parameter</h2>
      <p>URL example: <code>{path}?username=USERNAME</code></p>
      <p class="muted">Example themes: {themes}</p>
    </div>
    <div class="card">
      <h2>Generate Trophy</h2>
      <form action="{path}" method="get">
        <label for="username">GitHub Username</label>
        <input id="username" name="username" type="text" placeholder="Ex. h-sumiya" required />
        <label for="theme">Theme (optional)</label>
        <input id="theme" name="theme" type="text" placeholder="Ex. onedark" value="default" />
        <button type="submit">Get Trophies</button>
      </form>
    </div>""")


def error_page(err: TrophyCaseError) -> str:
  return _page(f"""    <div class="card">
      <h1>{err.status_code} - {escape(err.title)}</h1>
      <p>{escape(err.message)}</p>
    </div>""")
