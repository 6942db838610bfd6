import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from trophycase.config import GITHUB_API, GITHUB_TOKENS
from trophycase.credentials import CredentialPool
from trophycase.errors import ConfigurationError, TrophyCaseError
from trophycase.github_client import GithubClient
from trophycase.routes.trophy import router as trophy_router, trophy_error_handler
from trophycase.services.aggregator import ParallelAggregator
from trophycase.services.caches import RenderCache, StatsCache
from trophycase.services.pipeline import Pipeline

log = logging.getLogger("startup")
if not log.handlers:
  h = logging.StreamHandler()
  h.setFormatter(logging.Formatter("[Startup] %(levelname)s: %(message)s"))
  log.addHandler(h)
  log.setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
  log.info("Python: %s", sys.executable)
  log.info("GITHUB_API: %s", GITHUB_API)
  pool = CredentialPool(GITHUB_TOKENS)
  log.info("tokens configured: %d", len(pool))

  async with GithubClient(GITHUB_API) as gh:
    if pool.single_token_mode:
      try:
        await pool.resolve_owner(gh)
      except TrophyCaseError as e:
        raise ConfigurationError(f"could not resolve the token owner: {e.message}") from e

    aggregator = ParallelAggregator(gh)
    app.state.pipeline = Pipeline(pool, gh, StatsCache(pool, aggregator), RenderCache())
    yield


app = FastAPI(title="GitHub Profile Trophy", lifespan=lifespan)
app.add_exception_handler(TrophyCaseError, trophy_error_handler)

#health check
@app.get("/api/health", response_class=PlainTextResponse)
async def health():
  return "ok"

#register routes
app.include_router(trophy_router)
