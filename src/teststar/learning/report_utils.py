from __future__ import annotations

from typing import Iterable, List

from teststar.learning.models import Goal, Report


def report_to_markdown(report: Report) -> str:
    """Convert a Report to markdown for review or download."""
    lines: list[str] = [
        f"# {report.subject}: {report.chapter}",
        "",
        f"**Score:** {report.score:.0f}% ({report.marks_scored}/{report.total_marks} marks)",
        f"**Correct answers:** {report.correct_answers}/{report.total_questions}",
        f"**Time taken:** {report.time_taken // 60}m {report.time_taken % 60}s",
        f"**Date:** {report.date:%Y-%m-%d %H:%M}",
        "",
    ]
    if report.weak_areas:
        lines.append("**Areas to review:** " + ", ".join(report.weak_areas))
        lines.append("")

    for idx, question in enumerate(report.questions):
        answer = report.answers[idx] if idx < len(report.answers) else None
        lines.append(f"## Question {idx + 1} ({question.marks} mark{'s' if question.marks != 1 else ''})")
        lines.append(question.question_text)
        lines.append("")
        if question.is_gradable:
            selected = answer.selected_option_index if answer else None
            for choice_idx, choice in enumerate(question.options or []):
                prefix = chr(65 + choice_idx)
                marker = ""
                if choice_idx == question.correct_option_index:
                    marker = " (correct)"
                elif choice_idx == selected:
                    marker = " (your answer)"
                lines.append(f"{prefix}. {choice}{marker}")
            lines.append("")
            status = "Correct" if answer and answer.is_correct else "Incorrect"
            lines.append(f"**{status}**")
            lines.append("")
        else:
            written = answer.written_answer if answer and answer.written_answer else "_No answer_"
            lines.append(f"**Your answer:** {written}")
            lines.append("")
            if question.model_answer:
                lines.append(f"**Model answer:** {question.model_answer}")
                lines.append("")
        if answer and answer.solution:
            lines.append(f"**Explanation:** {answer.solution}")
            lines.append("")
        lines.append("---")
        lines.append("")

    return "\n".join(lines)


def collect_weak_areas(reports: Iterable[Report]) -> List[str]:
    """Distinct weak areas across all reports, first occurrence first."""
    seen: List[str] = []
    for report in reports:
        for area in report.weak_areas:
            if area not in seen:
                seen.append(area)
    return seen


def motivational_message(goal: Goal) -> str:
    """Short encouragement for a goal; separates reached targets from expired windows."""
    progress = (goal.current_value / goal.target_value) * 100 if goal.target_value > 0 else 0
    if goal.status == "completed" and progress < 100:
        return "Time's up! You made great progress."
    if goal.status == "completed":
        return "Goal Achieved! Amazing job! 🎉"
    if progress <= 0:
        return "Let's get started on your goal! You can do it."
    if progress < 50:
        return "Good start! Every step counts towards success."
    return "You're getting so close! Keep up the great work."
