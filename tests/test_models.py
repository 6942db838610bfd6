from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import PAYLOADS
from trophycase.github_client import Facet
from trophycase.models import (
  RawStatsBundle,
  RenderKey,
  Subject,
  UserActivity,
  UserIssue,
  UserPullRequest,
  UserRepository,
)


def parts(activity=None, repos=None):
  return (
    UserActivity.model_validate(activity or PAYLOADS[Facet.ACTIVITY]),
    UserIssue.model_validate(PAYLOADS[Facet.ISSUE]),
    UserPullRequest.model_validate(PAYLOADS[Facet.PULL_REQUEST]),
    UserRepository.model_validate(repos or PAYLOADS[Facet.REPOSITORY]),
  )


def test_account_age_uses_earliest_repository():
  now = datetime(2024, 3, 4, tzinfo=timezone.utc)
  bundle = RawStatsBundle.from_parts(*parts(), now=now)

  # earliest repo 2012-03-04 predates the 2015 account
  assert bundle.duration_year == 12
  assert bundle.duration_days == (now - datetime(2012, 3, 4, tzinfo=timezone.utc)).days // 100
  assert bundle.ancient_account == 0
  assert bundle.og_account == 0
  assert bundle.joined_2020 == 0


def test_account_flags():
  activity = dict(PAYLOADS[Facet.ACTIVITY], createdAt="2008-05-01T00:00:00Z")
  bundle = RawStatsBundle.from_parts(*parts(activity=activity), now=datetime(2024, 1, 1, tzinfo=timezone.utc))
  assert bundle.og_account == 1
  assert bundle.ancient_account == 1

  activity = dict(PAYLOADS[Facet.ACTIVITY], createdAt="2020-07-01T00:00:00Z")
  empty = {"repositories": {"totalCount": 0, "nodes": []}}
  bundle = RawStatsBundle.from_parts(*parts(activity=activity, repos=empty), now=datetime(2024, 1, 1, tzinfo=timezone.utc))
  assert bundle.joined_2020 == 1
  assert bundle.total_stargazers == 0
  assert bundle.language_count == 0


def test_bundle_is_immutable():
  bundle = RawStatsBundle(total_commits=1)
  with pytest.raises(ValidationError):
    bundle.total_commits = 2


def test_render_key_ignores_filter_order():
  a = RenderKey(subject=Subject(login="x"), titles=frozenset(["Stars", "Commits"]), ranks=frozenset(["S", "A"]))
  b = RenderKey(subject=Subject(login="x"), titles=frozenset(["Commits", "Stars"]), ranks=frozenset(["A", "S"]))
  assert a == b
  assert hash(a) == hash(b)
  assert a != RenderKey(subject=Subject(login="x", include_private=True), titles=a.titles, ranks=a.ranks)
