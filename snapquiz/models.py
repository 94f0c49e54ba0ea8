"""SQLModel models for the SnapQuiz backend."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKeyConstraint, Numeric, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class McqType(str, Enum):
    """The two supported question variants."""

    single = "single"
    multiple = "multiple"


class User(SQLModel, table=True):
    """Account that owns generated tests and records attempts."""

    __table_args__ = (
        UniqueConstraint("username", name="uq_user_username"),
        UniqueConstraint("email", name="uq_user_email"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    first: str
    last: str
    username: str
    email: str
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)


class Test(SQLModel, table=True):
    """A generated multiple-choice test."""

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    user_id: int = Field(foreign_key="user.id", index=True)
    generated_at: datetime = Field(default_factory=_utcnow)


class Question(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    test_id: int = Field(foreign_key="test.id", ondelete="CASCADE", index=True)
    question_text: str
    mcq_type: McqType
    explanation_text: Optional[str] = None


class Option(SQLModel, table=True):
    # (id, question_id) is the target of Answer's composite foreign key
    __table_args__ = (UniqueConstraint("id", "question_id", name="uq_option_question"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    question_id: int = Field(foreign_key="question.id", ondelete="CASCADE", index=True)
    option_text: str
    is_correct: bool = Field(default=False)


class Attempt(SQLModel, table=True):
    """One scored submission of a test by a user."""

    id: Optional[int] = Field(default=None, primary_key=True)
    test_id: int = Field(foreign_key="test.id", ondelete="CASCADE", index=True)
    user_id: int = Field(index=True)
    # percentage with 2 decimals; read back as float since SQLite has no native decimal
    score: float = Field(default=0.0, sa_type=Numeric(5, 2, asdecimal=False))
    created_at: datetime = Field(default_factory=_utcnow)


class Answer(SQLModel, table=True):
    """One selected option of one question within an attempt."""

    __table_args__ = (
        ForeignKeyConstraint(
            ["selected_option_id", "question_id"],
            ["option.id", "option.question_id"],
            name="fk_answer_option_of_question",
            ondelete="CASCADE",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    attempt_id: int = Field(foreign_key="attempt.id", ondelete="CASCADE", index=True)
    question_id: int = Field(foreign_key="question.id", ondelete="CASCADE")
    selected_option_id: int
