"""Goal progress over fixed calendar windows anchored to each goal's start date."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from teststar.learning.models import ANY_SUBJECT, Goal, GoalType, Report, Timeframe
from teststar.utils.dates import add_month, start_of_month, start_of_week, to_local


def goal_window(timeframe: Timeframe, start_date: datetime) -> Tuple[datetime, datetime]:
    """
    Return the half-open `[start, end)` window for a goal.

    Weeks open on the Sunday before (or of) `start_date`, months on the 1st. The
    window depends on nothing but the two arguments, so it never drifts with "now".
    """
    if timeframe == "week":
        window_start = start_of_week(start_date)
        return window_start, window_start + timedelta(days=7)
    window_start = start_of_month(start_date)
    return window_start, add_month(window_start)


def subject_matches(goal_subject: str, report_subject: str) -> bool:
    wanted = goal_subject.strip().lower()
    if wanted == ANY_SUBJECT.lower():
        return True
    return wanted in report_subject.lower()


def _mean_score(reports: Sequence[Report]) -> float:
    if not reports:
        return 0.0
    return sum(report.score for report in reports) / len(reports)


def compute_goal_value(goal: Goal, reports: Iterable[Report]) -> float:
    """Current value of `goal` measured against the report history."""
    window_start, window_end = goal_window(goal.timeframe, goal.start_date)
    matching = sorted(
        (report for report in reports if subject_matches(goal.subject, report.subject)),
        key=lambda report: to_local(report.date),
    )
    in_window = [
        report for report in matching if window_start <= to_local(report.date) < window_end
    ]

    if goal.type == "completion":
        return float(len(in_window))

    if not in_window:
        return 0.0
    goal_start = to_local(goal.start_date)
    baseline = [report for report in matching if to_local(report.date) < goal_start]
    return max(0.0, _mean_score(in_window) - _mean_score(baseline))


def evaluate_goal(goal: Goal, reports: Iterable[Report], now: Optional[datetime] = None) -> Goal:
    """
    Recompute a goal's value and status.

    Completed goals are returned untouched. An active goal whose window has ended
    becomes completed whether or not it reached its target; otherwise it completes
    once its value reaches the target. The input goal is never mutated.
    """
    if goal.status == "completed":
        return goal

    moment = to_local(now or datetime.now())
    _, window_end = goal_window(goal.timeframe, goal.start_date)
    current_value = compute_goal_value(goal, reports)

    if moment > window_end:
        status = "completed"
    else:
        status = "completed" if current_value >= goal.target_value else "active"

    return goal.model_copy(update={"current_value": current_value, "status": status})


def update_goal_progress(
    goals: Sequence[Goal],
    reports: Sequence[Report],
    now: Optional[datetime] = None,
) -> List[Goal]:
    """Evaluate every goal against the same history and moment."""
    moment = now or datetime.now()
    history = list(reports)
    return [evaluate_goal(goal, history, moment) for goal in goals]


def create_goal(
    *,
    description: str,
    goal_type: GoalType,
    target_value: float,
    timeframe: Timeframe,
    subject: str = ANY_SUBJECT,
    now: Optional[datetime] = None,
) -> Goal:
    """Build a fresh active goal whose window is anchored to `now`."""
    return Goal(
        id=f"goal_{uuid.uuid4().hex[:12]}",
        description=description,
        type=goal_type,
        subject=subject,
        target_value=target_value,
        current_value=0.0,
        timeframe=timeframe,
        start_date=now or datetime.now(),
        status="active",
    )
