from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from teststar.agents.llm_client import LLMClient
from teststar.config import Settings, load_settings
from teststar.learning import (
    GradingService,
    ProgressOrchestrator,
    ProgressTracker,
    ProgressUpdate,
    create_goal,
)
from teststar.learning.models import (
    ANY_SUBJECT,
    Answer,
    FeedbackPreference,
    Goal,
    GoalType,
    Report,
    Test,
    Timeframe,
    UserProfile,
)
from teststar.storage import ReportJsonlStore
from teststar.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """A graded report together with the progress changes it caused."""

    report: Report
    progress: ProgressUpdate


class TeststarSystem:
    """
    Main facade coordinating grading, storage and progress analytics.

    Wires the configured storage blobs, the optional LLM client used for answer
    explanations, the grading service and the progress orchestrator. Both the CLI
    and any UI layer talk to this object only.

    Attributes
    ----------
    settings : Settings
        Configuration loaded from YAML.
    report_store : ReportJsonlStore
        Report history (``reports.jsonl``).
    progress_tracker : ProgressTracker
        Profile and goal blobs (``profile.json``, ``goals.json``).
    llm_client : LLMClient | None
        Generation-service client; None when no API key is available, in which
        case full-detail feedback is graded without explanations.
    grading_service : GradingService
        Turns submissions into reports.
    orchestrator : ProgressOrchestrator
        Reconciles goals and badges after every history change.
    """

    def __init__(
        self,
        settings: Settings,
        api_key: Optional[str] = None,
        llm_client: Optional[LLMClient] = None,
    ):
        self.settings = settings
        configure_logging(
            settings.logging.level,
            settings.logging.use_json,
            logs_dir=settings.paths.logs_dir,
        )

        paths = settings.paths
        self.report_store = ReportJsonlStore(paths.reports_path)
        self.progress_tracker = ProgressTracker(paths.profile_path, paths.goals_path)

        if llm_client is None:
            try:
                llm_client = LLMClient(settings.model, api_key=api_key)
            except RuntimeError as exc:
                logger.warning("Explanations disabled: %s", exc)
        self.llm_client = llm_client

        self.grading_service = GradingService(settings.grading, llm_client=self.llm_client)
        self.orchestrator = ProgressOrchestrator(self.progress_tracker, self.report_store)

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        api_key: Optional[str] = None,
    ) -> "TeststarSystem":
        """
        Construct a system from a YAML configuration file.

        Raises
        ------
        FileNotFoundError
            If the configuration file doesn't exist.
        ValueError
            If the configuration or its env overrides are invalid.
        """
        settings = load_settings(config_path)
        settings.paths.data_dir.mkdir(parents=True, exist_ok=True)
        return cls(settings, api_key=api_key)

    # Profile -----------------------------------------------------------------

    def get_profile(self) -> Optional[UserProfile]:
        return self.progress_tracker.load_profile()

    def create_profile(self, *, name: str, grade: int, board: str, dob: Optional[str] = None) -> UserProfile:
        profile = self.progress_tracker.create_profile(name=name, grade=grade, board=board, dob=dob)
        # Badges for any history recorded before onboarding.
        self.orchestrator.refresh()
        return self.progress_tracker.load_profile() or profile

    def set_feedback_preference(self, preference: FeedbackPreference) -> UserProfile:
        profile = self._require_profile()
        profile = self.progress_tracker.set_feedback_preference(profile, preference)
        self.progress_tracker.save_profile(profile)
        return profile

    # Reports -----------------------------------------------------------------

    def submit_test(
        self,
        test: Test,
        answers: Sequence[Answer],
        time_taken: float,
        now: Optional[datetime] = None,
    ) -> SubmissionResult:
        """
        Grade a completed test, store the report and reconcile goals and badges.

        Feedback detail and the grade level used in explanation prompts come from
        the stored profile.
        """
        profile = self._require_profile()
        report = self.grading_service.grade(
            test=test,
            answers=answers,
            time_taken=time_taken,
            feedback_preference=profile.feedback_preference,
            grade=profile.grade,
            now=now,
        )
        progress = self.orchestrator.record_report(report, now=now)
        return SubmissionResult(report=report, progress=progress)

    def list_reports(self) -> List[Report]:
        return self.report_store.load()

    def get_report(self, report_id: str) -> Optional[Report]:
        return self.report_store.get(report_id)

    def delete_report(self, report_id: str, now: Optional[datetime] = None) -> ProgressUpdate:
        return self.orchestrator.delete_report(report_id, now=now)

    # Goals -------------------------------------------------------------------

    def list_goals(self) -> List[Goal]:
        return self.progress_tracker.load_goals()

    def add_goal(
        self,
        *,
        description: str,
        goal_type: GoalType,
        target_value: float,
        timeframe: Timeframe,
        subject: str = ANY_SUBJECT,
        now: Optional[datetime] = None,
    ) -> Goal:
        """Create a goal anchored to `now` and evaluate it against existing history."""
        goal = create_goal(
            description=description,
            goal_type=goal_type,
            target_value=target_value,
            timeframe=timeframe,
            subject=subject,
            now=now,
        )
        self.progress_tracker.add_goal(goal)
        update = self.orchestrator.refresh(now)
        return next((stored for stored in update.goals if stored.id == goal.id), goal)

    def delete_goal(self, goal_id: str) -> bool:
        return self.progress_tracker.remove_goal(goal_id)

    def refresh_progress(self, now: Optional[datetime] = None) -> ProgressUpdate:
        return self.orchestrator.refresh(now)

    def _require_profile(self) -> UserProfile:
        profile = self.progress_tracker.load_profile()
        if profile is None:
            raise RuntimeError("No learner profile found; create one first.")
        return profile
