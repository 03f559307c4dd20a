from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from teststar.learning.badges import BADGES, longest_streak
from teststar.learning.models import ANY_SUBJECT, Answer, Test
from teststar.learning.orchestrator import ProgressUpdate
from teststar.learning.report_utils import (
    collect_weak_areas,
    motivational_message,
    report_to_markdown,
)
from teststar.system import TeststarSystem

app = typer.Typer(help="Grade tests and track study goals and badges locally.")
console = Console()

load_dotenv(override=False)


def _load_system(config: Optional[Path], api_key: Optional[str] = None) -> TeststarSystem:
    """Instantiate `TeststarSystem` with optional config path and API key."""
    return TeststarSystem.from_config(config, api_key=api_key)


def _print_progress(update: ProgressUpdate) -> None:
    for badge in update.new_badges:
        console.print(f"{badge.icon} [bold green]Badge earned:[/bold green] {badge.name} - {badge.description}")
    if update.goals_changed:
        console.print("Goal progress updated.")


@app.command("init-profile")
def init_profile(
    name: str = typer.Argument(...),
    grade: int = typer.Option(..., min=1, help="School grade."),
    board: str = typer.Option("CBSE", help="Education board."),
    dob: Optional[str] = typer.Option(None, help="Date of birth (YYYY-MM-DD)."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Create the local learner profile."""
    system = _load_system(config)
    profile = system.create_profile(name=name, grade=grade, board=board, dob=dob)
    console.print(f"Profile created for [bold]{profile.name}[/bold] (grade {profile.grade}, {profile.board}).")


@app.command()
def profile(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """Show the profile, streak and areas that need review."""
    system = _load_system(config)
    learner = system.get_profile()
    if learner is None:
        console.print("No profile yet. Run `teststar init-profile` first.")
        raise typer.Exit(code=1)
    reports = system.list_reports()
    console.print(f"[bold]{learner.name}[/bold] - grade {learner.grade}, {learner.board}")
    console.print(f"Feedback: {learner.feedback_preference}")
    console.print(f"Tests taken: {len(reports)}")
    console.print(f"Longest streak: {longest_streak(reports)} day(s)")
    weak_areas = collect_weak_areas(reports)
    if weak_areas:
        console.print("Areas to review: " + ", ".join(weak_areas))


@app.command("set-feedback")
def set_feedback(
    preference: str = typer.Argument(..., help="'full' or 'summary'."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Choose whether incorrect answers get AI explanations."""
    if preference not in ("full", "summary"):
        raise typer.BadParameter("preference must be 'full' or 'summary'.")
    system = _load_system(config)
    system.set_feedback_preference(preference)  # type: ignore[arg-type]
    console.print(f"Feedback preference set to {preference}.")


@app.command()
def grade(
    test_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    answers_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    time_taken: int = typer.Option(0, min=0, help="Elapsed time in seconds."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
    api_key: Optional[str] = typer.Option(None, help="Model API key."),
):
    """
    Grade a test submission stored as JSON and record the report.

    `test_file` holds a test object; `answers_file` holds a list of answer objects in
    question order.
    """
    try:
        test = Test.model_validate_json(test_file.read_text(encoding="utf-8"))
        raw_answers = json.loads(answers_file.read_text(encoding="utf-8"))
        answers: List[Answer] = [Answer.model_validate(item) for item in raw_answers]
    except (ValidationError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Could not read submission: {exc}") from exc

    system = _load_system(config, api_key)
    result = system.submit_test(test, answers, time_taken)
    report = result.report
    console.print(
        f"[bold]{report.subject}[/bold]: {report.score:.0f}% "
        f"({report.marks_scored}/{report.total_marks} marks, "
        f"{report.correct_answers}/{report.total_questions} correct)"
    )
    if report.weak_areas:
        console.print("Weak areas: " + ", ".join(report.weak_areas))
    console.print(f"Report id: {report.id}")
    _print_progress(result.progress)


@app.command()
def reports(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """List stored reports."""
    system = _load_system(config)
    table = Table("Id", "Date", "Subject", "Chapter", "Score", "Time")
    for report in system.list_reports():
        table.add_row(
            report.id,
            f"{report.date:%Y-%m-%d %H:%M}",
            report.subject,
            report.chapter,
            f"{report.score:.0f}%",
            f"{report.time_taken}s",
        )
    console.print(table)


@app.command("show-report")
def show_report(
    report_id: str = typer.Argument(...),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Print a report as markdown."""
    system = _load_system(config)
    report = system.get_report(report_id)
    if report is None:
        console.print(f"Report {report_id} not found.")
        raise typer.Exit(code=1)
    console.print(report_to_markdown(report))


@app.command("delete-report")
def delete_report(
    report_id: str = typer.Argument(...),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Delete a report and re-evaluate goals and badges."""
    system = _load_system(config)
    if system.get_report(report_id) is None:
        console.print(f"Report {report_id} not found.")
        raise typer.Exit(code=1)
    update = system.delete_report(report_id)
    console.print(f"Deleted {report_id}.")
    _print_progress(update)


@app.command("add-goal")
def add_goal(
    description: str = typer.Argument(...),
    goal_type: str = typer.Option("completion", "--type", help="'completion' or 'improvement'."),
    target: float = typer.Option(..., min=0, help="Test count or score-point improvement."),
    timeframe: str = typer.Option("week", help="'week' or 'month'."),
    subject: str = typer.Option(ANY_SUBJECT, help="Subject filter; 'Any' matches all."),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Create a study goal starting now."""
    if goal_type not in ("completion", "improvement"):
        raise typer.BadParameter("type must be 'completion' or 'improvement'.")
    if timeframe not in ("week", "month"):
        raise typer.BadParameter("timeframe must be 'week' or 'month'.")
    system = _load_system(config)
    try:
        goal = system.add_goal(
            description=description,
            goal_type=goal_type,  # type: ignore[arg-type]
            target_value=target,
            timeframe=timeframe,  # type: ignore[arg-type]
            subject=subject,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    console.print(f"Goal {goal.id} created ({goal.current_value:g}/{goal.target_value:g}).")


@app.command()
def goals(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """Show goals with their current progress."""
    system = _load_system(config)
    update = system.refresh_progress()
    table = Table("Id", "Goal", "Subject", "Progress", "Status", "Message")
    for goal in update.goals:
        table.add_row(
            goal.id,
            goal.description,
            goal.subject,
            f"{goal.current_value:g}/{goal.target_value:g}",
            goal.status,
            motivational_message(goal),
        )
    console.print(table)
    _print_progress(update)


@app.command("delete-goal")
def delete_goal(
    goal_id: str = typer.Argument(...),
    config: Optional[Path] = typer.Option(None, help="Path to configuration YAML."),
):
    """Delete a goal."""
    system = _load_system(config)
    if not system.delete_goal(goal_id):
        console.print(f"Goal {goal_id} not found.")
        raise typer.Exit(code=1)
    console.print(f"Deleted {goal_id}.")


@app.command()
def badges(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """Show the badge catalog and which badges are earned."""
    system = _load_system(config)
    learner = system.get_profile()
    earned = set(learner.badges) if learner else set()
    table = Table("", "Badge", "Description", "Earned")
    for badge in BADGES:
        table.add_row(badge.icon, badge.name, badge.description, "yes" if badge.id in earned else "")
    console.print(table)


@app.command()
def refresh(config: Optional[Path] = typer.Option(None, help="Path to configuration YAML.")):
    """Re-evaluate goals and badges against the stored history."""
    system = _load_system(config)
    update = system.refresh_progress()
    _print_progress(update)
    if not update.goals_changed and not update.new_badges:
        console.print("Everything is up to date.")


if __name__ == "__main__":
    app()
