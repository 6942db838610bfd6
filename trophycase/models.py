from datetime import datetime, timedelta, timezone
from pydantic import BaseModel, ConfigDict, Field
from typing import FrozenSet, List, Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# ----------------------------
# GraphQL facet payloads (field names mirror the API)
# ----------------------------
class TotalCount(BaseModel):
  totalCount: int = 0


class ContributionsCollection(BaseModel):
  totalCommitContributions: int = 0
  restrictedContributionsCount: int = 0
  totalPullRequestReviewContributions: int = 0


class UserActivity(BaseModel):
  createdAt: datetime
  contributionsCollection: ContributionsCollection
  organizations: TotalCount
  followers: TotalCount


class UserIssue(BaseModel):
  openIssues: TotalCount
  closedIssues: TotalCount


class UserPullRequest(BaseModel):
  pullRequests: TotalCount


class LanguageNode(BaseModel):
  name: str


class Languages(BaseModel):
  nodes: List[Optional[LanguageNode]] = []


class RepositoryNode(BaseModel):
  languages: Languages = Field(default_factory=Languages)
  stargazers: TotalCount = Field(default_factory=TotalCount)
  createdAt: datetime


class Repositories(BaseModel):
  totalCount: int = 0
  nodes: List[Optional[RepositoryNode]] = []


class UserRepository(BaseModel):
  repositories: Repositories


class Viewer(BaseModel):
  login: str


# ----------------------------
# Joined statistics
# ----------------------------
class RawStatsBundle(BaseModel):
  model_config = ConfigDict(frozen=True)

  total_commits: int = 0
  total_followers: int = 0
  total_issues: int = 0
  total_organizations: int = 0
  total_pull_requests: int = 0
  total_reviews: int = 0
  total_stargazers: int = 0
  total_repositories: int = 0
  language_count: int = 0
  duration_year: int = 0
  duration_days: int = 0
  ancient_account: int = 0
  joined_2020: int = 0
  og_account: int = 0

  @classmethod
  def from_parts(
      cls,
      activity: UserActivity,
      issue: UserIssue,
      pull_request: UserPullRequest,
      repository: UserRepository,
      *,
      now: Optional[datetime] = None,
  ) -> "RawStatsBundle":
    now = now or datetime.now(timezone.utc)
    cc = activity.contributionsCollection

    stars = 0
    languages = set()
    earliest = activity.createdAt
    for repo in repository.repositories.nodes:
      if repo is None:
        continue
      stars += repo.stargazers.totalCount
      languages.update(lang.name for lang in repo.languages.nodes if lang is not None)
      if repo.createdAt < earliest:
        earliest = repo.createdAt

    elapsed = max(now - earliest, timedelta(0))
    earliest_year = earliest.year

    return cls(
        total_commits=cc.totalCommitContributions + cc.restrictedContributionsCount,
        total_followers=activity.followers.totalCount,
        total_issues=issue.openIssues.totalCount + issue.closedIssues.totalCount,
        total_organizations=activity.organizations.totalCount,
        total_pull_requests=pull_request.pullRequests.totalCount,
        total_reviews=cc.totalPullRequestReviewContributions,
        total_stargazers=stars,
        total_repositories=repository.repositories.totalCount,
        language_count=len(languages),
        duration_year=(_EPOCH + elapsed).year - 1970,
        duration_days=elapsed.days // 100,
        ancient_account=int(earliest_year <= 2010),
        joined_2020=int(earliest_year == 2020),
        og_account=int(earliest_year <= 2008),
    )


# ----------------------------
# Request / cache keys
# ----------------------------
class Subject(BaseModel):
  model_config = ConfigDict(frozen=True)

  login: str
  include_private: bool = False


class RenderKey(BaseModel):
  model_config = ConfigDict(frozen=True)

  subject: Subject
  titles: FrozenSet[str] = frozenset()
  ranks: FrozenSet[str] = frozenset()
  row: Optional[int] = None
  column: Optional[int] = None
  theme: str = "default"
  margin_w: int = 0
  margin_h: int = 0
  no_bg: bool = False
  no_frame: bool = False


class TrophyRequest(BaseModel):
  username: Optional[str] = None
  title: List[str] = []
  rank: List[str] = []
  row: Optional[int] = Field(default=None, ge=0)
  column: Optional[int] = Field(default=None, ge=0)
  theme: str = "default"
  margin_w: Optional[int] = Field(default=None, ge=0)
  margin_h: Optional[int] = Field(default=None, ge=0)
  no_bg: bool = False
  no_frame: bool = False
