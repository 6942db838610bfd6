# trophycase/services/trophy.py
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from trophycase.models import RawStatsBundle


class Rank(str, Enum):
  SECRET = "SECRET"
  SSS = "SSS"
  SS = "SS"
  S = "S"
  AAA = "AAA"
  AA = "AA"
  A = "A"
  B = "B"
  C = "C"

  @property
  def first_letter(self) -> str:
    return self.value[0]


RANK_ORDER: Tuple[Rank, ...] = tuple(Rank)
S_FAMILY = (Rank.SSS, Rank.SS, Rank.S)


@dataclass(frozen=True)
class RankCondition:
  rank: Rank
  message: str
  required_score: int


@dataclass(frozen=True)
class TrophyCategory:
  id: str
  aliases: Tuple[str, ...]
  conditions: Tuple[RankCondition, ...]
  stat: Callable[[RawStatsBundle], int]
  bottom_label: Optional[str] = None

  def matches(self, title: str) -> bool:
    return title == self.id or title in self.aliases


@dataclass(frozen=True)
class ComputedTrophy:
  id: str
  rank: Rank
  top_message: str
  bottom_message: str
  score: int
  progress: float

  @property
  def rank_label(self) -> str:
    return self.rank.value


def _ladder(messages: Iterable[str], scores: Iterable[int]) -> Tuple[RankCondition, ...]:
  ranks = (Rank.SSS, Rank.SS, Rank.S, Rank.AAA, Rank.AA, Rank.A, Rank.B, Rank.C)
  return tuple(RankCondition(r, m, s) for r, m, s in zip(ranks, messages, scores))


def _secret(message: str, score: int) -> Tuple[RankCondition, ...]:
  return (RankCondition(Rank.SECRET, message, score),)


# ----------------------------
# Rank conditions
# ----------------------------
CONDITION_STARS = _ladder(
  ["Super Stargazer", "High Stargazer", "Stargazer", "Super Star",
   "High Star", "You are a Star", "Middle Star", "First Star"],
  [2000, 700, 200, 100, 50, 30, 10, 1],
)
CONDITION_COMMITS = _ladder(
  ["God Committer", "Deep Committer", "Super Committer", "Ultra Committer",
   "Hyper Committer", "High Committer", "Middle Committer", "First Commit"],
  [4000, 2000, 1000, 500, 200, 100, 10, 1],
)
CONDITION_FOLLOWERS = _ladder(
  ["Super Celebrity", "Ultra Celebrity", "Hyper Celebrity", "Famous User",
   "Active User", "Dynamic User", "Many Friends", "First Friend"],
  [1000, 400, 200, 100, 50, 20, 10, 1],
)
CONDITION_ISSUES = _ladder(
  ["God Issuer", "Deep Issuer", "Super Issuer", "Ultra Issuer",
   "Hyper Issuer", "High Issuer", "Middle Issuer", "First Issue"],
  [1000, 500, 200, 100, 50, 20, 10, 1],
)
CONDITION_PULL_REQUESTS = _ladder(
  ["God Puller", "Deep Puller", "Super Puller", "Ultra Puller",
   "Hyper Puller", "High Puller", "Middle Puller", "First Pull"],
  [1000, 500, 200, 100, 50, 20, 10, 1],
)
CONDITION_REPOSITORIES = _ladder(
  ["God Repo Creator", "Deep Repo Creator", "Super Repo Creator", "Ultra Repo Creator",
   "Hyper Repo Creator", "High Repo Creator", "Middle Repo Creator", "First Repository"],
  [50, 45, 40, 35, 30, 20, 10, 1],
)
CONDITION_REVIEWS = _ladder(
  ["God Reviewer", "Deep Reviewer", "Super Reviewer", "Ultra Reviewer",
   "Hyper Reviewer", "Active Reviewer", "Intermediate Reviewer", "New Reviewer"],
  [70, 57, 45, 30, 20, 8, 3, 1],
)
CONDITION_ACCOUNT_DURATION = _ladder(
  ["Seasoned Veteran", "Grandmaster", "Master Dev", "Expert Dev",
   "Experienced Dev", "Intermediate Dev", "Junior Dev", "Newbie"],
  [70, 55, 40, 28, 18, 11, 6, 2],
)

# ----------------------------
# Catalog (display order)
# ----------------------------
BASE_CATALOG: Tuple[TrophyCategory, ...] = (
  TrophyCategory("Stars", ("Star", "Stars"), CONDITION_STARS, lambda b: b.total_stargazers),
  TrophyCategory("Commits", ("Commit", "Commits"), CONDITION_COMMITS, lambda b: b.total_commits),
  TrophyCategory("Followers", ("Follower", "Followers"), CONDITION_FOLLOWERS, lambda b: b.total_followers),
  TrophyCategory("Issues", ("Issue", "Issues"), CONDITION_ISSUES, lambda b: b.total_issues),
  TrophyCategory("PullRequest", ("PR", "PullRequest", "Pulls", "Puller"), CONDITION_PULL_REQUESTS,
                 lambda b: b.total_pull_requests),
  TrophyCategory("Repositories", ("Repo", "Repository", "Repositories"), CONDITION_REPOSITORIES,
                 lambda b: b.total_repositories),
  TrophyCategory("Reviews", ("Review", "Reviews"), CONDITION_REVIEWS, lambda b: b.total_reviews),
)

# AllSuperRank's score is derived from the base trophies, not from the bundle
ALL_SUPER_RANK = TrophyCategory(
  "AllSuperRank", ("AllSuperRank",), _secret("S Rank Hacker", 1), lambda b: 0, "All S Rank",
)

EXTRA_CATALOG: Tuple[TrophyCategory, ...] = (
  TrophyCategory("MultiLanguage", ("MultipleLang", "MultiLanguage"),
                 _secret("Rainbow Lang User", 10), lambda b: b.language_count),
  TrophyCategory("LongTimeUser", ("LongTimeUser",),
                 _secret("Village Elder", 10), lambda b: b.duration_year),
  TrophyCategory("AncientUser", ("AncientUser",),
                 _secret("Ancient User", 1), lambda b: b.ancient_account, "Before 2010"),
  TrophyCategory("OGUser", ("OGUser",),
                 _secret("OG User", 1), lambda b: b.og_account, "Joined 2008"),
  TrophyCategory("Joined2020", ("Joined2020",),
                 _secret("Everything started...", 1), lambda b: b.joined_2020, "Joined 2020"),
  TrophyCategory("Organizations", ("Organizations", "Orgs", "Teams"),
                 _secret("Jack of all Trades", 3), lambda b: b.total_organizations),
  TrophyCategory("Experience", ("Experience", "Duration", "Since"),
                 CONDITION_ACCOUNT_DURATION, lambda b: b.duration_days),
)

CATALOG: Tuple[TrophyCategory, ...] = BASE_CATALOG + (ALL_SUPER_RANK,) + EXTRA_CATALOG
TITLES: Tuple[str, ...] = tuple(c.id for c in CATALOG)


# ----------------------------
# Helpers
# ----------------------------
def abridge_score(score: int) -> str:
  """5 -> '5pt', 1000 -> '1.0kpt'."""
  if abs(score) < 1:
    return "0pt"
  if abs(score) > 999:
    return f"{score / 1000:.1f}kpt"
  return f"{score}pt"


def _best_condition(category: TrophyCategory, score: int) -> Optional[RankCondition]:
  for cond in sorted(category.conditions, key=lambda c: RANK_ORDER.index(c.rank)):
    if score >= cond.required_score:
      return cond
  return None


def _next_rank_progress(category: TrophyCategory, cond: RankCondition, score: int) -> float:
  idx = RANK_ORDER.index(cond.rank)
  if idx == 0 or cond.rank is Rank.SSS:
    return 1.0
  upper = next((c for c in category.conditions if c.rank is RANK_ORDER[idx - 1]), None)
  if upper is None:
    return 1.0
  distance = upper.required_score - cond.required_score
  if distance <= 0:
    return 1.0
  return min(1.0, max(0.0, (score - cond.required_score) / distance))


def score_category(category: TrophyCategory, score: int) -> Optional[ComputedTrophy]:
  cond = _best_condition(category, score)
  if cond is None:
    return None
  return ComputedTrophy(
      id=category.id,
      rank=cond.rank,
      top_message=cond.message,
      bottom_message=category.bottom_label or abridge_score(score),
      score=score,
      progress=_next_rank_progress(category, cond, score),
  )


def _split_filter(values: Iterable[str]) -> Tuple[set, set]:
  include, exclude = set(), set()
  for v in values or ():
    v = v.strip()
    if not v:
      continue
    if v.startswith("-"):
      exclude.add(v[1:])
    else:
      include.add(v)
  return include, exclude


# ----------------------------
# Scoring
# ----------------------------
def compute(
    bundle: RawStatsBundle,
    requested_titles: Iterable[str] = (),
    requested_ranks: Iterable[str] = (),
    row: Optional[int] = None,
    column: Optional[int] = None,
) -> List[ComputedTrophy]:
  """
  Trophies earned by `bundle`, in catalog order.
    - categories with no met threshold are left out,
    - titles: keep matching ids/aliases; '-Title' drops a category,
    - ranks: keep listed ranks, or drop '-RANK' entries if any are given,
    - at most row*column entries when both are positive.
  """
  base = [score_category(c, c.stat(bundle)) for c in BASE_CATALOG]
  all_super = int(all(t is not None and t.rank in S_FAMILY for t in base))

  earned: List[Tuple[TrophyCategory, ComputedTrophy]] = []
  for cat, trophy in zip(BASE_CATALOG, base):
    if trophy is not None:
      earned.append((cat, trophy))
  for cat, score in [(ALL_SUPER_RANK, all_super)] + [(c, c.stat(bundle)) for c in EXTRA_CATALOG]:
    trophy = score_category(cat, score)
    if trophy is not None:
      earned.append((cat, trophy))

  include, exclude = _split_filter(requested_titles)
  if include:
    earned = [(c, t) for c, t in earned if any(c.matches(x) for x in include)]
  if exclude:
    earned = [(c, t) for c, t in earned if not any(c.matches(x) for x in exclude)]

  rank_include, rank_exclude = _split_filter(requested_ranks)
  if rank_exclude:
    earned = [(c, t) for c, t in earned if t.rank_label not in rank_exclude]
  elif rank_include:
    earned = [(c, t) for c, t in earned if t.rank_label in rank_include]

  trophies = [t for _, t in earned]
  if row and column and row > 0 and column > 0:
    trophies = trophies[: row * column]
  return trophies
