# trophycase/github_client.py
import asyncio
import email.utils
import enum
import logging
import time
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError as SchemaError

from trophycase.config import GITHUB_API, HTTP_CONNECT_TIMEOUT_SECS, HTTP_TIMEOUT_SECS
from trophycase.credentials import Credential
from trophycase.errors import (
  UpstreamMalformed,
  UpstreamNotFound,
  UpstreamRateLimited,
  UpstreamTransient,
  UpstreamUnauthorized,
)
from trophycase.models import (
  Subject,
  UserActivity,
  UserIssue,
  UserPullRequest,
  UserRepository,
  Viewer,
)

log = logging.getLogger("github_client")
if not log.handlers:
  h = logging.StreamHandler()
  h.setFormatter(logging.Formatter("[GH] %(levelname)s: %(message)s"))
  log.addHandler(h)
  log.setLevel(logging.INFO)

# ----------------------------
# GraphQL documents
# ----------------------------
QUERY_USER_ACTIVITY = """
query userInfo($username: String!) {
  user(login: $username) {
    createdAt
    contributionsCollection {
      totalCommitContributions
      restrictedContributionsCount
      totalPullRequestReviewContributions
    }
    organizations(first: 1) {
      totalCount
    }
    followers(first: 1) {
      totalCount
    }
  }
}
"""

QUERY_USER_ISSUE = """
query userInfo($username: String!) {
  user(login: $username) {
    openIssues: issues(states: OPEN) {
      totalCount
    }
    closedIssues: issues(states: CLOSED) {
      totalCount
    }
  }
}
"""

QUERY_USER_PULL_REQUEST = """
query userInfo($username: String!) {
  user(login: $username) {
    pullRequests(first: 1) {
      totalCount
    }
  }
}
"""

QUERY_USER_REPOSITORY = """
query userInfo($username: String!) {
  user(login: $username) {
    repositories(first: 50, ownerAffiliations: OWNER%s, orderBy: {direction: DESC, field: STARGAZERS}) {
      totalCount
      nodes {
        languages(first: 3, orderBy: {direction: DESC, field: SIZE}) {
          nodes {
            name
          }
        }
        stargazers {
          totalCount
        }
        createdAt
      }
    }
  }
}
"""

QUERY_VIEWER = """
query {
  viewer {
    login
  }
}
"""


class Facet(str, enum.Enum):
  ACTIVITY = "activity"
  ISSUE = "issue"
  PULL_REQUEST = "pull_request"
  REPOSITORY = "repository"


FACET_MODELS: Dict[Facet, Type[BaseModel]] = {
  Facet.ACTIVITY: UserActivity,
  Facet.ISSUE: UserIssue,
  Facet.PULL_REQUEST: UserPullRequest,
  Facet.REPOSITORY: UserRepository,
}


def facet_query(kind: Facet, subject: Subject) -> str:
  if kind is Facet.ACTIVITY:
    return QUERY_USER_ACTIVITY
  if kind is Facet.ISSUE:
    return QUERY_USER_ISSUE
  if kind is Facet.PULL_REQUEST:
    return QUERY_USER_PULL_REQUEST
  # private repositories only count for the token owner
  return QUERY_USER_REPOSITORY % ("" if subject.include_private else ", privacy: PUBLIC")


def _retry_after(r: httpx.Response) -> Optional[float]:
  ra = r.headers.get("Retry-After")
  if ra:
    try:
      return max(0.0, float(ra))
    except ValueError:
      pass
    try:
      parsed = email.utils.parsedate_to_datetime(ra)
    except (TypeError, ValueError):
      return None
    return max(0.0, parsed.timestamp() - time.time())
  reset = r.headers.get("X-RateLimit-Reset")
  if reset and reset.isdigit():
    return max(0.0, int(reset) - time.time())
  return None


def _is_rate_limited_message(msg: Any) -> bool:
  return isinstance(msg, str) and "rate limit" in msg.lower()


class GithubClient:
  def __init__(self, api_url: str = GITHUB_API, *, transport: httpx.AsyncBaseTransport | None = None):
    self.api_url = api_url
    self._transport = transport
    self._client: Optional[httpx.AsyncClient] = None

  async def __aenter__(self):
    limits = httpx.Limits(max_keepalive_connections=16, max_connections=64, keepalive_expiry=90.0)
    headers = {
      "User-Agent": "github-profile-trophy-py",
      "Accept": "application/json",
      "Content-Type": "application/json",
    }
    self._client = httpx.AsyncClient(
        timeout=httpx.Timeout(HTTP_TIMEOUT_SECS, connect=HTTP_CONNECT_TIMEOUT_SECS),
        limits=limits,
        headers=headers,
        transport=self._transport,
    )
    return self

  async def __aexit__(self, *exc):
    if self._client:
      await self._client.aclose()
      self._client = None

  async def fetch(self, kind: Facet, subject: Subject, credential: Credential) -> BaseModel:
    """Run one facet document for `subject`; returns the parsed `user` object."""
    payload = {"query": facet_query(kind, subject), "variables": {"username": subject.login}}
    data = await self._post(payload, credential, what=f"{kind.value}:{subject.login}")
    user = data.get("user")
    if user is None:
      raise UpstreamNotFound(f"user '{subject.login}' not found")
    try:
      return FACET_MODELS[kind].model_validate(user)
    except SchemaError as e:
      raise UpstreamMalformed(f"unexpected {kind.value} payload: {e.error_count()} validation errors") from e

  async def fetch_viewer(self, credential: Credential) -> str:
    data = await self._post({"query": QUERY_VIEWER}, credential, what="viewer")
    try:
      return Viewer.model_validate(data.get("viewer")).login
    except SchemaError as e:
      raise UpstreamMalformed("unexpected viewer payload") from e

  async def _post(self, payload: dict, credential: Credential, *, what: str) -> dict:
    if self._client is None:
      raise RuntimeError("GithubClient used outside of 'async with'")

    headers = {"Authorization": f"bearer {credential.token}"}
    try:
      # httpx.Timeout bounds each phase; this bounds the whole exchange
      async with asyncio.timeout(HTTP_TIMEOUT_SECS):
        r = await self._client.post(self.api_url, json=payload, headers=headers)
    except (httpx.TimeoutException, TimeoutError) as e:
      log.warning("%s timed out", what)
      raise UpstreamTransient(f"GitHub request timed out ({what})") from e
    except httpx.DecodingError as e:
      log.warning("%s undecodable body: %s", what, e)
      raise UpstreamMalformed(f"GitHub response could not be decoded ({what})") from e
    except httpx.RequestError as e:
      log.warning("%s request error: %s", what, e)
      raise UpstreamTransient(f"GitHub request failed ({what}): {e}") from e

    try:
      body = r.json()
    except ValueError:
      body = None

    err = self._classify(r, body)
    if err is not None:
      log.warning("%s -> %s (%s)", what, type(err).__name__, err.message)
      raise err
    return body["data"]

  @staticmethod
  def _classify(r: httpx.Response, body: Any) -> Exception | None:
    status = r.status_code
    message = body.get("message") if isinstance(body, dict) else None
    errors = (body.get("errors") if isinstance(body, dict) else None) or []

    if status == 429 or (
        status == 403
        and (r.headers.get("X-RateLimit-Remaining") == "0" or _is_rate_limited_message(message))
    ):
      return UpstreamRateLimited("GitHub rate limit exceeded", retry_after=_retry_after(r))
    if status == 401 or (isinstance(message, str) and "bad credentials" in message.lower()):
      return UpstreamUnauthorized("GitHub rejected the token")
    if status == 403:
      return UpstreamUnauthorized(f"GitHub refused access: {message or 'forbidden'}")
    if status >= 500:
      return UpstreamTransient(f"GitHub responded {status}")
    if status == 404:
      return UpstreamNotFound("GitHub endpoint not found")
    if status >= 400:
      return UpstreamMalformed(f"GitHub responded {status}: {message or ''}".strip())
    if not isinstance(body, dict):
      return UpstreamMalformed("GitHub response was not a JSON object")

    for e in errors:
      if not isinstance(e, dict):
        continue
      etype = str(e.get("type") or "").upper()
      if "RATE_LIMIT" in etype or _is_rate_limited_message(e.get("message")):
        return UpstreamRateLimited("GitHub rate limit exceeded", retry_after=_retry_after(r))
    if _is_rate_limited_message(message):
      return UpstreamRateLimited("GitHub rate limit exceeded", retry_after=_retry_after(r))

    data = body.get("data")
    if any(isinstance(e, dict) and str(e.get("type") or "").upper() == "NOT_FOUND" for e in errors):
      return UpstreamNotFound("Sorry, the user you are looking for was not found.")
    forbidden = [e for e in errors if isinstance(e, dict) and str(e.get("type") or "").upper() == "FORBIDDEN"]
    usable = isinstance(data, dict) and any(v is not None for v in data.values())
    if forbidden and not usable:
      return UpstreamUnauthorized(f"GitHub refused access: {forbidden[0].get('message') or 'forbidden'}")
    if not isinstance(data, dict):
      if errors:
        first = errors[0].get("message") if isinstance(errors[0], dict) else errors[0]
        return UpstreamMalformed(f"GraphQL error: {first}")
      return UpstreamMalformed("GitHub response has no 'data'")
    return None
