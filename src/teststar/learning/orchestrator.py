from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Sequence

from teststar.learning.badges import BADGES, BadgeDefinition, check_all_badges
from teststar.learning.goals import update_goal_progress
from teststar.learning.models import Goal, Report
from teststar.learning.progress import ProgressTracker

if TYPE_CHECKING:
    from teststar.storage import ReportJsonlStore

logger = logging.getLogger(__name__)


@dataclass
class ProgressUpdate:
    """Outcome of reconciling goals and badges with the report history."""

    goals: List[Goal]
    goals_changed: bool = False
    new_badges: List[BadgeDefinition] = field(default_factory=list)


class ProgressOrchestrator:
    """
    Keep the stored goals and earned badges in step with the report history.

    Goals and badges are derived views over reports, so every append or deletion
    triggers a full `refresh`. Writes happen only when something changed. Badge ids
    are merged by set union and completed goals are never re-opened, even when the
    history that earned them has been deleted.
    """

    def __init__(
        self,
        progress_tracker: ProgressTracker,
        report_store: ReportJsonlStore,
        catalog: Sequence[BadgeDefinition] = BADGES,
    ):
        self.progress_tracker = progress_tracker
        self.report_store = report_store
        self.catalog = list(catalog)

    def record_report(self, report: Report, now: Optional[datetime] = None) -> ProgressUpdate:
        self.report_store.append(report)
        logger.info("Stored report %s (%s, score=%.1f)", report.id, report.subject, report.score)
        return self.refresh(now)

    def delete_report(self, report_id: str, now: Optional[datetime] = None) -> ProgressUpdate:
        removed = self.report_store.delete([report_id])
        if not removed:
            logger.warning("Report %s not found; nothing deleted", report_id)
        return self.refresh(now)

    def refresh(self, now: Optional[datetime] = None) -> ProgressUpdate:
        """Recompute every goal and the badge set, persisting only real changes."""
        moment = now or datetime.now()
        reports = self.report_store.load()

        goals = self.progress_tracker.load_goals()
        updated_goals = update_goal_progress(goals, reports, moment)
        goals_changed = updated_goals != goals
        if goals_changed:
            self.progress_tracker.save_goals(updated_goals)
            logger.info("Updated progress for %d goal(s)", len(updated_goals))

        new_badges: List[BadgeDefinition] = []
        profile = self.progress_tracker.load_profile()
        if profile is None:
            logger.debug("No profile yet; skipping badge reconciliation")
        else:
            qualifying = check_all_badges(reports, self.catalog)
            new_badges = [
                badge
                for badge in self.catalog
                if badge.id in qualifying and badge.id not in profile.badges
            ]
            if new_badges:
                profile = self.progress_tracker.add_badges(
                    profile, [badge.id for badge in new_badges]
                )
                self.progress_tracker.save_profile(profile)
                logger.info("Earned badge(s): %s", ", ".join(badge.id for badge in new_badges))

        if not goals_changed and not new_badges:
            logger.debug("Progress unchanged for %d report(s)", len(reports))

        return ProgressUpdate(
            goals=updated_goals, goals_changed=goals_changed, new_badges=new_badges
        )
