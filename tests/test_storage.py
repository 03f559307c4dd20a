"""Tests for report history and profile/goal blob persistence."""

from __future__ import annotations

from datetime import datetime

import pytest

from teststar.learning.goals import create_goal
from teststar.learning.grading import build_report
from teststar.learning.models import Answer, Test
from teststar.learning.progress import ProgressTracker
from teststar.storage import ReportJsonlStore

from conftest import make_report, mcq


@pytest.fixture
def report_store(temp_data_dir):
    return ReportJsonlStore(temp_data_dir / "nested" / "reports.jsonl")


@pytest.fixture
def progress_tracker(temp_data_dir):
    return ProgressTracker(temp_data_dir / "profile.json", temp_data_dir / "goals.json")


def test_report_history_round_trip(report_store):
    test = Test(id="t1", subject="Math", chapter="Ratios", questions=[mcq("Q1", "Ratios")])
    report = build_report(
        test,
        [Answer(question_index=0, selected_option_index=2, solution=None)],
        time_taken=12,
        feedback_preference="full",
        now=datetime(2024, 3, 1, 8, 15),
    )

    assert report_store.load() == []
    report_store.append(report)

    assert report_store.load() == [report]
    assert report_store.get(report.id) == report
    assert report_store.get("missing") is None


def test_report_history_keeps_order_and_deletes(report_store):
    first = make_report("Math", datetime(2024, 1, 1), report_id="r1")
    second = make_report("Science", datetime(2024, 1, 2), report_id="r2")
    report_store.append(first)
    report_store.append(second)

    assert [report.id for report in report_store.load()] == ["r1", "r2"]
    assert report_store.delete(["r1"]) == 1
    assert report_store.delete(["r1"]) == 0
    assert [report.id for report in report_store.load()] == ["r2"]


def test_profile_missing_until_created(progress_tracker):
    assert progress_tracker.load_profile() is None

    profile = progress_tracker.create_profile(name="Asha", grade=7, board="CBSE")

    assert profile.badges == []
    assert profile.feedback_preference == "summary"
    assert progress_tracker.load_profile() == profile


def test_badges_only_grow(progress_tracker):
    profile = progress_tracker.create_profile(name="Asha", grade=7, board="CBSE")

    updated = progress_tracker.add_badges(profile, ["first_test", "math_whiz"])
    again = progress_tracker.add_badges(updated, ["math_whiz", "first_test"])

    assert updated.badges == ["first_test", "math_whiz"]
    assert again is updated
    assert profile.badges == []


def test_feedback_preference_persists(progress_tracker):
    profile = progress_tracker.create_profile(name="Asha", grade=7, board="CBSE")
    progress_tracker.save_profile(progress_tracker.set_feedback_preference(profile, "full"))
    assert progress_tracker.load_profile().feedback_preference == "full"


def test_goal_blob_add_and_remove(progress_tracker):
    goal = create_goal(
        description="Two tests",
        goal_type="completion",
        target_value=2,
        timeframe="week",
        now=datetime(2024, 1, 10, 10),
    )

    assert progress_tracker.load_goals() == []
    progress_tracker.add_goal(goal)
    assert progress_tracker.load_goals() == [goal]

    assert progress_tracker.remove_goal("nope") is False
    assert progress_tracker.remove_goal(goal.id) is True
    assert progress_tracker.load_goals() == []
