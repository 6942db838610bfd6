import os
from dotenv import load_dotenv

load_dotenv()

GITHUB_API = os.getenv("GITHUB_API", "https://api.github.com/graphql")

# GITHUB_TOKEN1/GITHUB_TOKEN2 rotate; a lone GITHUB_TOKEN enables single-token mode
GITHUB_TOKENS = [
  t for t in (os.getenv("GITHUB_TOKEN1"), os.getenv("GITHUB_TOKEN2"), os.getenv("GITHUB_TOKEN"))
  if t and t.strip()
]

PORT = int(os.getenv("PORT", "8080"))

#Upstream
HTTP_TIMEOUT_SECS = float(os.getenv("HTTP_TIMEOUT_SECS", "20"))
HTTP_CONNECT_TIMEOUT_SECS = float(os.getenv("HTTP_CONNECT_TIMEOUT_SECS", "10"))
RETRY_MAX_ATTEMPTS = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
RETRY_BASE_DELAY_SECS = 0.5
RATE_LIMIT_MAX_WAIT_SECS = float(os.getenv("RATE_LIMIT_MAX_WAIT_SECS", "10"))

#Caches
USER_CACHE_TTL_SECS = 60 * 60 * 4
SVG_CACHE_TTL_SECS = 60 * 60
CACHE_MAX_ENTRIES = 20_000

#HTTP response caching
CACHE_MAX_AGE = 18_800
CDN_CACHE_MAX_AGE = 28_800
STALE_WHILE_REVALIDATE = 86_400

#Card layout defaults
DEFAULT_PANEL_SIZE = 110
DEFAULT_MAX_COLUMN = 8
DEFAULT_MAX_ROW = 3
DEFAULT_MARGIN_W = 0
DEFAULT_MARGIN_H = 0
DEFAULT_THEME = "default"
