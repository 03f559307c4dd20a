from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator, validator

QuestionType = Literal["MCQ", "SHORT", "LONG"]
FeedbackPreference = Literal["full", "summary"]
GoalType = Literal["completion", "improvement"]
Timeframe = Literal["week", "month"]
GoalStatus = Literal["active", "completed"]

ANY_SUBJECT = "Any"


class Question(BaseModel):
    """Single test item as authored by the generation service."""

    question_text: str
    question_type: QuestionType
    marks: int = Field(gt=0)
    topic: str
    options: Optional[List[str]] = None  # MCQ only
    correct_option_index: Optional[int] = Field(default=None, ge=0, le=3)
    model_answer: Optional[str] = None  # SHORT / LONG only

    @model_validator(mode="after")
    def validate_choices(self) -> "Question":
        if self.question_type != "MCQ":
            return self
        if not self.options or len(self.options) != 4:
            raise ValueError("MCQ options must contain exactly four choices")
        if any(not option or not option.strip() for option in self.options):
            raise ValueError("MCQ options must be non-empty")
        if self.correct_option_index is None:
            raise ValueError("MCQ questions need a correct_option_index")
        return self

    @property
    def is_gradable(self) -> bool:
        return self.question_type == "MCQ"


class Test(BaseModel):
    """An ordered list of questions on one subject and chapter."""

    __test__ = False  # keep pytest from collecting this model

    id: str
    subject: str
    chapter: str
    questions: List[Question]


class Answer(BaseModel):
    """Learner response to one question; `is_correct`/`solution` are filled by grading."""

    question_index: int = Field(ge=0)
    selected_option_index: Optional[int] = None
    written_answer: Optional[str] = None
    is_correct: Optional[bool] = None
    solution: Optional[str] = None


class Report(BaseModel):
    """Durable performance record for one completed test."""

    id: str
    subject: str
    chapter: str
    score: float = Field(ge=0.0, le=100.0)
    total_marks: int = Field(ge=0)
    marks_scored: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    correct_answers: int = Field(ge=0)
    time_taken: int = Field(ge=0, description="Elapsed time in whole seconds.")
    date: datetime
    weak_areas: List[str] = Field(default_factory=list)
    answers: List[Answer] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    feedback_preference: FeedbackPreference = "summary"


class Goal(BaseModel):
    """User-defined study target measured over a fixed calendar window."""

    id: str
    description: str
    type: GoalType
    subject: str = ANY_SUBJECT
    target_value: float = Field(gt=0)
    current_value: float = 0.0
    timeframe: Timeframe
    start_date: datetime
    status: GoalStatus = "active"

    @validator("subject")
    def default_blank_subject(cls, value: str) -> str:
        """Treat a blank subject filter as the all-subjects wildcard."""
        return value.strip() or ANY_SUBJECT


class UserProfile(BaseModel):
    """The single local learner profile, including earned badge ids."""

    name: str
    grade: int = Field(ge=1)
    board: str
    dob: Optional[str] = None
    badges: List[str] = Field(default_factory=list)
    feedback_preference: FeedbackPreference = "summary"
