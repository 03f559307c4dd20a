from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from teststar.learning.models import FeedbackPreference, Goal, UserProfile


class ProgressTracker:
    """
    Handle persistence and monotonic updates for the profile and goal blobs.

    The tracker owns two JSON documents: the single local learner profile (which
    carries the earned badge ids) and the goal list. Both are serialized with
    pydantic so every field round-trips exactly. Report history lives in
    `ReportJsonlStore`; goals and badges are derived from it and reconciled by
    `ProgressOrchestrator`.

    Storage Format
    --------------
    ``profile.json``::

        {
          "name": "Asha",
          "grade": 8,
          "board": "CBSE",
          "dob": null,
          "badges": ["first_test", "math_whiz"],
          "feedback_preference": "summary"
        }

    ``goals.json`` is a JSON array of goal objects.

    Attributes
    ----------
    profile_path : Path
        Location of the profile document.
    goals_path : Path
        Location of the goal list document.

    Examples
    --------
    >>> tracker = ProgressTracker(Path("data/profile.json"), Path("data/goals.json"))
    >>> profile = tracker.create_profile(name="Asha", grade=8, board="CBSE")
    >>> profile = tracker.add_badges(profile, ["first_test"])
    >>> tracker.save_profile(profile)
    """

    def __init__(self, profile_path: Path, goals_path: Path):
        """Record blob locations and create their parent directories."""
        self.profile_path = profile_path
        self.goals_path = goals_path
        self.profile_path.parent.mkdir(parents=True, exist_ok=True)
        self.goals_path.parent.mkdir(parents=True, exist_ok=True)

    def load_profile(self) -> Optional[UserProfile]:
        """
        Load the learner profile, or return None before onboarding has happened.

        Raises
        ------
        json.JSONDecodeError
            If the profile file exists but contains invalid JSON.
        pydantic.ValidationError
            If the stored document no longer matches the profile schema.
        """
        if not self.profile_path.exists():
            return None
        with self.profile_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return UserProfile.model_validate(data)

    def save_profile(self, profile: UserProfile) -> None:
        """Serialize the learner profile back to disk."""
        with self.profile_path.open("w", encoding="utf-8") as handle:
            handle.write(profile.model_dump_json(indent=2))

    def create_profile(
        self,
        *,
        name: str,
        grade: int,
        board: str,
        dob: Optional[str] = None,
    ) -> UserProfile:
        """Create and persist a fresh profile with no badges and summary feedback."""
        profile = UserProfile(name=name, grade=grade, board=board, dob=dob)
        self.save_profile(profile)
        return profile

    def set_feedback_preference(
        self, profile: UserProfile, preference: FeedbackPreference
    ) -> UserProfile:
        return profile.model_copy(update={"feedback_preference": preference})

    def add_badges(self, profile: UserProfile, badge_ids: Iterable[str]) -> UserProfile:
        """
        Return a profile whose badges are the union of existing and new ids.

        Badges are milestones already reached, so ids are only ever appended, never
        removed. Existing order is kept and new ids follow in the order given.

        Parameters
        ----------
        profile : UserProfile
            Current profile (not modified).
        badge_ids : Iterable[str]
            Ids the learner qualifies for now; ids already earned are ignored.

        Returns
        -------
        UserProfile
            The same object when nothing new was earned, otherwise an updated copy.
        """
        earned = list(profile.badges)
        for badge_id in badge_ids:
            if badge_id not in earned:
                earned.append(badge_id)
        if earned == profile.badges:
            return profile
        return profile.model_copy(update={"badges": earned})

    def load_goals(self) -> List[Goal]:
        """Read the goal list, returning an empty list when none were stored."""
        if not self.goals_path.exists():
            return []
        with self.goals_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return [Goal.model_validate(item) for item in data]

    def save_goals(self, goals: Iterable[Goal]) -> None:
        payload = [goal.model_dump(mode="json") for goal in goals]
        with self.goals_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)

    def add_goal(self, goal: Goal) -> List[Goal]:
        goals = self.load_goals()
        goals.append(goal)
        self.save_goals(goals)
        return goals

    def remove_goal(self, goal_id: str) -> bool:
        """Delete a goal by id; returns False when no such goal exists."""
        goals = self.load_goals()
        remaining = [goal for goal in goals if goal.id != goal_id]
        if len(remaining) == len(goals):
            return False
        self.save_goals(remaining)
        return True
