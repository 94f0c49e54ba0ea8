"""Pydantic request/response models for the JSON API."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

from snapquiz.models import McqType


class CamelModel(BaseModel):
    """API models are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ===================== ATTEMPTS =====================


class AttemptCreate(CamelModel):
    test_id: PositiveInt
    # JSON object keys arrive as strings and are coerced to ints here
    answers: dict[PositiveInt, list[PositiveInt]]


class AttemptCreated(CamelModel):
    success: bool = True
    attempt_id: int
    score: float


class OptionReview(CamelModel):
    id: int
    text: str
    is_correct: bool
    is_selected: bool


class QuestionReview(CamelModel):
    question_id: int
    text: str
    type: McqType
    explanation: Optional[str] = None
    score: float
    options: list[OptionReview] = Field(default_factory=list)


class AttemptReview(CamelModel):
    """Post-submission view of an attempt, correct answers included."""

    success: bool = True
    id: int
    test_id: int
    title: str
    score: float
    created_at: datetime
    questions: list[QuestionReview] = Field(default_factory=list)


class AttemptSummary(CamelModel):
    id: int
    created_at: datetime
    score: float


class TestMeta(CamelModel):
    id: int
    title: str
    question_count: int


class AttemptListItem(CamelModel):
    id: str
    date: datetime
    score: float
    completed: bool = True


class TestAttempts(CamelModel):
    success: bool = True
    test: TestMeta
    attempts: list[AttemptListItem] = Field(default_factory=list)


# ===================== TESTS =====================


class GeneratedOption(BaseModel):
    option_text: str = Field(min_length=1)
    is_correct: bool


class GeneratedQuestion(BaseModel):
    question_text: str = Field(min_length=1)
    options: list[GeneratedOption]
    explanation: str = ""


class GeneratedTest(BaseModel):
    """Test payload as returned by the completion API (snake_case JSON)."""

    title: str = Field(min_length=1)
    questions: list[GeneratedQuestion] = Field(min_length=1)


class TestGenerated(CamelModel):
    success: bool = True
    test_id: int


class TestSummary(CamelModel):
    id: int
    title: str
    num_questions: int
    generated_at: datetime


class TestOption(CamelModel):
    option_id: int
    text: str


class TestQuestion(CamelModel):
    question_id: int
    text: str
    mcq_type: McqType
    explanation: Optional[str] = None
    options: list[TestOption] = Field(default_factory=list)


class TestDetail(CamelModel):
    """A test as shown while taking it: no correctness flags."""

    id: int
    title: str
    user_id: int
    generated_at: datetime
    questions: list[TestQuestion] = Field(default_factory=list)


# ===================== USERS =====================


class UserCreate(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    first: str = Field(min_length=1, max_length=100)
    last: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)


class UserRead(CamelModel):
    id: int
    first: str
    last: str
    username: str
    email: str
    created_at: datetime


class LoginRequest(CamelModel):
    username: str
    password: str
