"""Shared fixtures: canned GraphQL payloads, fake clock, fake upstream client."""

import asyncio
from typing import Any, Callable, Dict, List

import pytest

from trophycase.github_client import FACET_MODELS, Facet
from trophycase.models import RawStatsBundle

ACTIVITY = {
  "createdAt": "2015-06-01T00:00:00Z",
  "contributionsCollection": {
    "totalCommitContributions": 900,
    "restrictedContributionsCount": 100,
    "totalPullRequestReviewContributions": 8,
  },
  "organizations": {"totalCount": 3},
  "followers": {"totalCount": 55},
}
ISSUES = {"openIssues": {"totalCount": 4}, "closedIssues": {"totalCount": 16}}
PULLS = {"pullRequests": {"totalCount": 120}}
REPOS = {
  "repositories": {
    "totalCount": 31,
    "nodes": [
      {
        "languages": {"nodes": [{"name": "Python"}, {"name": "Rust"}]},
        "stargazers": {"totalCount": 150},
        "createdAt": "2012-03-04T00:00:00Z",
      },
      None,
      {
        "languages": {"nodes": [{"name": "Python"}, None, {"name": "Go"}]},
        "stargazers": {"totalCount": 60},
        "createdAt": "2018-01-01T00:00:00Z",
      },
    ],
  }
}

PAYLOADS = {
  Facet.ACTIVITY: ACTIVITY,
  Facet.ISSUE: ISSUES,
  Facet.PULL_REQUEST: PULLS,
  Facet.REPOSITORY: REPOS,
}


def graphql_body_for(query: str) -> Dict[str, Any]:
  """Pick the canned `data` payload matching a GraphQL document."""
  if "viewer" in query:
    return {"data": {"viewer": {"login": "octocat"}}}
  if "contributionsCollection" in query:
    return {"data": {"user": ACTIVITY}}
  if "openIssues" in query:
    return {"data": {"user": ISSUES}}
  if "pullRequests" in query:
    return {"data": {"user": PULLS}}
  return {"data": {"user": REPOS}}


class FakeClock:
  def __init__(self, t: float = 1000.0):
    self.t = t

  def __call__(self) -> float:
    return self.t

  def advance(self, secs: float) -> None:
    self.t += secs


class ScriptedClient:
  """
  Stand-in for GithubClient. `script[kind]` is a list of outcomes consumed in
  order (exceptions are raised); once exhausted the canned payload is returned.
  """

  def __init__(self, script: Dict[Facet, List[Any]] | None = None, viewer: Any = "octocat", delay: float = 0.0):
    self.script = {k: list(v) for k, v in (script or {}).items()}
    self.viewer = viewer
    self.delay = delay
    self.calls: List[tuple] = []
    self.viewer_calls = 0

  def count(self, kind: Facet) -> int:
    return sum(1 for k, _, _ in self.calls if k is kind)

  async def fetch(self, kind, subject, credential):
    self.calls.append((kind, subject, credential))
    if self.delay:
      await asyncio.sleep(self.delay)
    outcomes = self.script.get(kind)
    if outcomes:
      out = outcomes.pop(0)
      if isinstance(out, BaseException):
        raise out
      return out
    return FACET_MODELS[kind].model_validate(PAYLOADS[kind])

  async def fetch_viewer(self, credential):
    self.viewer_calls += 1
    await asyncio.sleep(0)
    if isinstance(self.viewer, BaseException):
      raise self.viewer
    return self.viewer


async def no_sleep(_secs: float) -> None:
  await asyncio.sleep(0)


def make_bundle(**overrides) -> RawStatsBundle:
  return RawStatsBundle(**overrides)


@pytest.fixture
def clock() -> FakeClock:
  return FakeClock()


@pytest.fixture
def scripted_client() -> Callable[..., ScriptedClient]:
  return ScriptedClient
