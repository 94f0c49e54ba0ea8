import logging
from collections import defaultdict
from typing import Iterable, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from snapquiz.exceptions import InvalidSelection, NotFound, PersistenceError, ValidationError
from snapquiz.models import Answer, Attempt, Option, Question, Test
from snapquiz.schemas import (
    AttemptCreated,
    AttemptReview,
    AttemptSummary,
    OptionReview,
    QuestionReview,
    TestMeta,
)
from snapquiz.scoring import aggregate_score, score_question

logger = logging.getLogger(__name__)


def _coerce_id(value, label: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label}: {value!r}")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}: {value!r}")
    if parsed < 1:
        raise ValidationError(f"Invalid {label}: {value!r}")
    return parsed


def normalize_selections(answers: Mapping) -> dict[int, list[int]]:
    """Turn a raw answer map into ``{question_id: [distinct option ids]}``.

    Keys and ids may be numeric strings (JSON object keys always are).
    Duplicate option ids are dropped, keeping first-seen order.

    Raises:
        ValidationError: If the map is empty or holds non-numeric ids
    """
    if not isinstance(answers, Mapping) or not answers:
        raise ValidationError("answers must map at least one question to its selected options")

    selections: dict[int, list[int]] = {}
    for raw_question_id, raw_selected in answers.items():
        question_id = _coerce_id(raw_question_id, "question id")
        if raw_selected is None:
            raw_selected = []
        if isinstance(raw_selected, (str, bytes)) or not isinstance(raw_selected, Iterable):
            raise ValidationError(f"Selected options for question {question_id} must be a list")
        option_ids = [_coerce_id(v, "option id") for v in raw_selected]
        merged = selections.setdefault(question_id, [])
        merged.extend(option_ids)

    return {qid: list(dict.fromkeys(ids)) for qid, ids in selections.items()}


def _correct_option_ids(session: Session, question_id: int) -> set[int]:
    stmt = select(Option.id).where(
        (Option.question_id == question_id) & (col(Option.is_correct).is_(True))
    )
    return set(session.exec(stmt).all())


def create_attempt(
    session: Session,
    test_id: int,
    user_id: int,
    answers: Mapping,
) -> AttemptCreated:
    """Record and score one submission of a test.

    The attempt row, its answer rows and the aggregate score are written in a
    single transaction: either all of them are committed or none is.

    Args:
        session: Database session (owned by the caller)
        test_id: Test being attempted
        user_id: Authenticated user submitting the attempt
        answers: Map of question id to selected option ids

    Returns:
        AttemptCreated with the new attempt id and its percentage score

    Raises:
        ValidationError: Malformed answers, or questions missing from or not in the test
        NotFound: The test does not exist
        InvalidSelection: An option does not belong to its question; nothing was persisted
        PersistenceError: Any other storage failure; nothing was persisted
    """
    test_id = _coerce_id(test_id, "test id")
    user_id = _coerce_id(user_id, "user id")
    selections = normalize_selections(answers)

    try:
        test = session.get(Test, test_id)
        question_types = dict(
            session.exec(select(Question.id, Question.mcq_type).where(Question.test_id == test_id)).all()
        )
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Error loading test {test_id} for a new attempt: {exc}", exc_info=True)
        raise PersistenceError(f"Failed to record attempt for test {test_id}", cause=exc) from exc

    if test is None:
        raise NotFound(f"Test {test_id} not found")

    unknown = sorted(set(selections) - set(question_types))
    if unknown:
        raise ValidationError(f"Questions {unknown} do not belong to test {test_id}")
    # unanswered questions are submitted as empty lists, so every question is scored
    missing = sorted(set(question_types) - set(selections))
    if missing:
        raise ValidationError(f"Answers for questions {missing} are missing; send [] for unanswered questions")

    try:
        attempt = Attempt(test_id=test_id, user_id=user_id, score=0.0)
        session.add(attempt)
        session.flush()
        attempt_id = attempt.id

        question_scores: List[float] = []
        for question_id, selected in selections.items():
            for option_id in selected:
                session.add(
                    Answer(attempt_id=attempt_id, question_id=question_id, selected_option_id=option_id)
                )
            session.flush()

            correct = _correct_option_ids(session, question_id)
            question_scores.append(score_question(question_types[question_id], selected, correct))

        score = aggregate_score(question_scores)
        attempt.score = score
        session.add(attempt)
        session.commit()
    except IntegrityError as exc:
        # composite FK: the option does not exist or belongs to another question
        session.rollback()
        logger.warning(f"Rejected selection for test {test_id}, user {user_id}: {exc.orig}")
        raise InvalidSelection(
            f"Selected options do not belong to their questions in test {test_id}", cause=exc
        ) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Error recording attempt for test {test_id}, user {user_id}: {exc}", exc_info=True)
        raise PersistenceError(f"Failed to record attempt for test {test_id}", cause=exc) from exc
    except Exception:
        session.rollback()
        raise

    logger.info(f"Attempt {attempt_id} recorded for test {test_id} by user {user_id}: {score}")
    return AttemptCreated(attempt_id=attempt_id, score=score)


def get_attempt(session: Session, attempt_id: int, user_id: Optional[int] = None) -> AttemptReview:
    """Rebuild the per-question review of a recorded attempt.

    Per-question scores are not stored; they are recomputed from the answer
    rows with the same `score_question` used when the attempt was written.
    When `user_id` is given, attempts of other users are reported as missing.

    Raises:
        NotFound: If the attempt does not exist or its test has no questions
    """
    attempt = session.get(Attempt, attempt_id)
    if attempt is None or (user_id is not None and attempt.user_id != user_id):
        raise NotFound(f"Attempt {attempt_id} not found")

    test = session.get(Test, attempt.test_id)
    questions = session.exec(
        select(Question).where(Question.test_id == attempt.test_id).order_by(Question.id)
    ).all()
    if test is None or not questions:
        raise NotFound(f"Attempt {attempt_id} not found")

    question_ids = [q.id for q in questions]
    options = session.exec(
        select(Option)
        .where(col(Option.question_id).in_(question_ids))
        .order_by(Option.question_id, Option.id)
    ).all()
    answers = session.exec(select(Answer).where(Answer.attempt_id == attempt_id)).all()

    options_by_question = defaultdict(list)
    for option in options:
        options_by_question[option.question_id].append(option)

    selected_by_question = defaultdict(set)
    for answer in answers:
        selected_by_question[answer.question_id].add(answer.selected_option_id)

    reviews = []
    for question in questions:
        question_options = options_by_question[question.id]
        selected = selected_by_question[question.id]
        correct = {o.id for o in question_options if o.is_correct}
        reviews.append(
            QuestionReview(
                question_id=question.id,
                text=question.question_text,
                type=question.mcq_type,
                explanation=question.explanation_text,
                score=score_question(question.mcq_type, selected, correct),
                options=[
                    OptionReview(
                        id=o.id,
                        text=o.option_text,
                        is_correct=o.is_correct,
                        is_selected=o.id in selected,
                    )
                    for o in question_options
                ],
            )
        )

    return AttemptReview(
        id=attempt.id,
        test_id=test.id,
        title=test.title,
        score=attempt.score,
        created_at=attempt.created_at,
        questions=reviews,
    )


def get_test_attempts(session: Session, test_id: int, user_id: int) -> List[AttemptSummary]:
    """All attempts of a user on a test, newest first."""
    stmt = (
        select(Attempt)
        .where((Attempt.test_id == test_id) & (Attempt.user_id == user_id))
        .order_by(col(Attempt.created_at).desc(), col(Attempt.id).desc())
    )
    return [AttemptSummary.model_validate(a) for a in session.exec(stmt).all()]


def get_test_meta(session: Session, test_id: int, user_id: int) -> TestMeta:
    """Title and question count of a test owned by `user_id`."""
    test = session.get(Test, test_id)
    if test is None or test.user_id != user_id:
        raise NotFound(f"Test {test_id} not found")
    count = session.exec(
        select(func.count(Question.id)).where(Question.test_id == test_id)
    ).one()
    return TestMeta(id=test.id, title=test.title, question_count=count)
