from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from teststar.agents.llm_client import LLMClient
from teststar.config.schema import GradingConfig
from teststar.learning.models import Answer, FeedbackPreference, Question, Report, Test

logger = logging.getLogger(__name__)

EXPLANATION_SYSTEM_MESSAGE = (
    "You are Teststar, a patient tutor who explains mistakes on school tests. "
    "Keep explanations short, concrete and encouraging."
)


def normalize_answers(test: Test, answers: Sequence[Answer]) -> List[Answer]:
    """
    Align submitted answers with the test's questions.

    Missing entries become unanswered, surplus entries are dropped, and every
    answer's `question_index` is reset to its position. Grading-only fields that a
    submitter may have filled in are cleared.
    """
    submitted = list(answers)
    aligned: List[Answer] = []
    for idx in range(len(test.questions)):
        if idx < len(submitted) and submitted[idx] is not None:
            aligned.append(
                submitted[idx].model_copy(
                    update={"question_index": idx, "is_correct": None, "solution": None}
                )
            )
        else:
            aligned.append(Answer(question_index=idx))
    return aligned


def build_report(
    test: Test,
    answers: Sequence[Answer],
    *,
    time_taken: float,
    feedback_preference: FeedbackPreference = "summary",
    now: Optional[datetime] = None,
    report_id: Optional[str] = None,
) -> Report:
    """
    Score a submission and return the resulting report without any explanations.

    Only MCQ questions are graded. The score is the percentage of MCQ marks earned,
    or 100 when the test has no MCQ marks at all. Weak areas are the distinct topics
    of incorrectly answered MCQs in question order.
    """
    aligned = normalize_answers(test, answers)
    graded: List[Answer] = []
    weak_areas: List[str] = []
    marks_earned = 0
    gradable_marks = 0
    correct = 0

    for question, answer in zip(test.questions, aligned):
        if not question.is_gradable:
            graded.append(answer)
            continue
        is_correct = answer.selected_option_index == question.correct_option_index
        gradable_marks += question.marks
        if is_correct:
            correct += 1
            marks_earned += question.marks
        elif question.topic not in weak_areas:
            weak_areas.append(question.topic)
        graded.append(answer.model_copy(update={"is_correct": is_correct}))

    score = (marks_earned / gradable_marks) * 100 if gradable_marks > 0 else 100.0

    return Report(
        id=report_id or f"report_{uuid.uuid4().hex[:12]}",
        subject=test.subject,
        chapter=test.chapter,
        score=score,
        total_marks=sum(question.marks for question in test.questions),
        marks_scored=marks_earned,
        total_questions=len(test.questions),
        correct_answers=correct,
        time_taken=max(0, int(time_taken)),
        date=now or datetime.now(),
        weak_areas=weak_areas,
        answers=graded,
        questions=list(test.questions),
        feedback_preference=feedback_preference,
    )


def explanation_prompt(question: Question, answer: Answer, grade: int) -> str:
    """Render the request for an explanation of one incorrect MCQ answer."""
    options = question.options or []
    correct = options[question.correct_option_index] if question.correct_option_index is not None else ""
    selected_index = answer.selected_option_index
    if selected_index is not None and 0 <= selected_index < len(options):
        selected = options[selected_index]
    else:
        selected = "No answer selected"
    return (
        f"A grade {grade} student answered a question incorrectly. Here are the details:\n"
        f'- Question: "{question.question_text}"\n'
        f"- Options: {'; '.join(options)}\n"
        f'- Correct Answer: "{correct}"\n'
        f'- Student\'s Answer: "{selected}"\n\n'
        "Please provide a helpful explanation:\n"
        "1. Restate the question.\n"
        "2. Briefly explain the misunderstanding behind the student's answer.\n"
        "3. Walk step by step through the correct solution.\n"
        "4. End with an encouraging note."
    )


class GradingService:
    """Grade test submissions and attach explanations for incorrect MCQ answers."""

    def __init__(self, config: GradingConfig | None = None, llm_client: LLMClient | None = None):
        self.config = config or GradingConfig()
        self.llm = llm_client

    def grade(
        self,
        *,
        test: Test,
        answers: Sequence[Answer],
        time_taken: float,
        feedback_preference: Optional[FeedbackPreference] = None,
        grade: int = 8,
        now: Optional[datetime] = None,
    ) -> Report:
        """Synchronously grade a submission; see `grade_async`."""
        return asyncio.run(
            self.grade_async(
                test=test,
                answers=answers,
                time_taken=time_taken,
                feedback_preference=feedback_preference,
                grade=grade,
                now=now,
            )
        )

    async def grade_async(
        self,
        *,
        test: Test,
        answers: Sequence[Answer],
        time_taken: float,
        feedback_preference: Optional[FeedbackPreference] = None,
        grade: int = 8,
        now: Optional[datetime] = None,
    ) -> Report:
        """
        Build the report and, under full feedback, request explanations concurrently.

        Every incorrect MCQ answer gets its own request. A failed request leaves the
        configured fallback text on that answer only; the report is always returned.
        """
        preference = feedback_preference or self.config.default_feedback
        report = build_report(
            test,
            answers,
            time_taken=time_taken,
            feedback_preference=preference,
            now=now,
        )
        if preference != "full":
            return report

        incorrect = [idx for idx, answer in enumerate(report.answers) if answer.is_correct is False]
        if not incorrect:
            return report
        if self.llm is None:
            logger.warning(
                "No LLM client configured; skipping %d explanation(s) for %s",
                len(incorrect),
                report.id,
            )
            return report

        semaphore = asyncio.Semaphore(self.config.max_concurrent_explanations)

        async def bounded(idx: int) -> Optional[str]:
            async with semaphore:
                return await self._explain(report.questions[idx], report.answers[idx], grade)

        solutions = await asyncio.gather(*(bounded(idx) for idx in incorrect))

        answers_with_solutions = list(report.answers)
        for idx, solution in zip(incorrect, solutions):
            answers_with_solutions[idx] = answers_with_solutions[idx].model_copy(
                update={"solution": solution}
            )
        return report.model_copy(update={"answers": answers_with_solutions})

    async def _explain(self, question: Question, answer: Answer, grade: int) -> Optional[str]:
        prompt = explanation_prompt(question, answer, grade)
        try:
            text = await asyncio.to_thread(
                self.llm.complete, prompt, system=EXPLANATION_SYSTEM_MESSAGE
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Explanation request failed for question %d: %s", answer.question_index, exc
            )
            return self.config.explanation_fallback
        return (text or "").strip() or self.config.explanation_fallback
