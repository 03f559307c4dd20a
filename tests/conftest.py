"""Shared fixtures for grading, goal and badge tests."""

from __future__ import annotations

import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pytest

from teststar.learning.models import Question, Report


class FakeLLM:
    """Stand-in for `LLMClient` that records prompts and fails on request."""

    def __init__(self, reply: str = "Here is why.", fail_on: Optional[str] = None):
        self.reply = reply
        self.fail_on = fail_on
        self.prompts: List[str] = []
        self._lock = threading.Lock()

    def complete(self, prompt: str, system: Optional[str] = None, **kwargs) -> str:
        with self._lock:
            self.prompts.append(prompt)
        if self.fail_on and self.fail_on in prompt:
            raise RuntimeError("generation service unavailable")
        return self.reply


def mcq(text: str, topic: str, correct: int = 0, marks: int = 1) -> Question:
    return Question(
        question_text=text,
        question_type="MCQ",
        marks=marks,
        topic=topic,
        options=["A", "B", "C", "D"],
        correct_option_index=correct,
    )


def make_report(
    subject: str,
    date: datetime,
    score: float = 50.0,
    report_id: Optional[str] = None,
) -> Report:
    return Report(
        id=report_id or f"report_{subject}_{date:%Y%m%d%H%M%S}_{score:g}",
        subject=subject,
        chapter="Chapter 1",
        score=score,
        total_marks=4,
        marks_scored=int(score / 25),
        total_questions=4,
        correct_answers=int(score / 25),
        time_taken=120,
        date=date,
    )


@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for blob storage."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_llm():
    return FakeLLM()
