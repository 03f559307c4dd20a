from .badges import BADGES, BadgeDefinition, check_all_badges
from .goals import create_goal, evaluate_goal, update_goal_progress
from .grading import GradingService, build_report
from .models import Answer, Goal, Question, Report, Test, UserProfile
from .orchestrator import ProgressOrchestrator, ProgressUpdate
from .progress import ProgressTracker

__all__ = [
    "BADGES",
    "BadgeDefinition",
    "check_all_badges",
    "create_goal",
    "evaluate_goal",
    "update_goal_progress",
    "GradingService",
    "build_report",
    "Answer",
    "Goal",
    "Question",
    "Report",
    "Test",
    "UserProfile",
    "ProgressOrchestrator",
    "ProgressUpdate",
    "ProgressTracker",
]
