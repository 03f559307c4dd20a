from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Iterable, List, Literal, Sequence, Set, Union

from pydantic import BaseModel, Field

from teststar.learning.models import Report
from teststar.utils.dates import local_day


def longest_streak(reports: Iterable[Report]) -> int:
    """Longest run of consecutive local calendar days with at least one report."""
    days = sorted({local_day(report.date) for report in reports})
    if not days:
        return 0
    best = current = 1
    for previous, day in zip(days, days[1:]):
        if day - previous == timedelta(days=1):
            current += 1
        else:
            current = 1
        best = max(best, current)
    return best


class FirstTestRule(BaseModel):
    kind: Literal["first_test"] = "first_test"

    def is_satisfied(self, reports: Sequence[Report]) -> bool:
        return len(reports) > 0


class PerfectScoreRule(BaseModel):
    kind: Literal["perfect_score"] = "perfect_score"

    def is_satisfied(self, reports: Sequence[Report]) -> bool:
        return any(report.score == 100 for report in reports)


class StreakRule(BaseModel):
    kind: Literal["streak"] = "streak"
    days: int = Field(5, ge=1)

    def is_satisfied(self, reports: Sequence[Report]) -> bool:
        return longest_streak(reports) >= self.days


class SubjectCountRule(BaseModel):
    """Completed at least `minimum` tests whose subject contains `keyword`."""

    kind: Literal["subject_count"] = "subject_count"
    keyword: str
    minimum: int = Field(3, ge=1)

    def is_satisfied(self, reports: Sequence[Report]) -> bool:
        keyword = self.keyword.lower()
        matches = sum(1 for report in reports if keyword in report.subject.lower())
        return matches >= self.minimum


BadgeRule = Annotated[
    Union[FirstTestRule, PerfectScoreRule, StreakRule, SubjectCountRule],
    Field(discriminator="kind"),
]


class BadgeDefinition(BaseModel):
    """Static catalog entry pairing display metadata with its earning rule."""

    id: str
    name: str
    icon: str
    description: str
    rule: BadgeRule


BADGES: List[BadgeDefinition] = [
    BadgeDefinition(
        id="first_test",
        name="First Test",
        icon="🏆",
        description="Complete your first test.",
        rule=FirstTestRule(),
    ),
    BadgeDefinition(
        id="perfect_score",
        name="Perfect Score",
        icon="🎯",
        description="Get a 100% score on any test.",
        rule=PerfectScoreRule(),
    ),
    BadgeDefinition(
        id="streak_5_day",
        name="5-Day Streak",
        icon="🔥",
        description="Complete a test on 5 consecutive days.",
        rule=StreakRule(days=5),
    ),
    BadgeDefinition(
        id="math_whiz",
        name="Math Whiz",
        icon="🧮",
        description="Complete 3 tests in Mathematics.",
        rule=SubjectCountRule(keyword="math", minimum=3),
    ),
    BadgeDefinition(
        id="science_genius",
        name="Science Genius",
        icon="🔬",
        description="Complete 3 tests in Science.",
        rule=SubjectCountRule(keyword="science", minimum=3),
    ),
]


def check_all_badges(
    reports: Iterable[Report],
    catalog: Sequence[BadgeDefinition] = BADGES,
) -> Set[str]:
    """Return every badge id the history currently qualifies for."""
    history = list(reports)
    if not history:
        return set()
    return {badge.id for badge in catalog if badge.rule.is_satisfied(history)}


def find_badge(badge_id: str, catalog: Sequence[BadgeDefinition] = BADGES) -> BadgeDefinition | None:
    return next((badge for badge in catalog if badge.id == badge_id), None)
