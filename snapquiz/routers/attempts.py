"""Attempt submission and review routes."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from snapquiz.database import get_session
from snapquiz.deps import require_login
from snapquiz.models import User
from snapquiz.schemas import AttemptCreate, AttemptCreated, AttemptListItem, AttemptReview, TestAttempts
from snapquiz.services import attempt_service

router = APIRouter()


@router.get("/all-test-attempts/{test_id}", response_model=TestAttempts)
def list_test_attempts(
    test_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    """All attempts of the current user on a test, newest first."""
    test_meta = attempt_service.get_test_meta(session, test_id, current_user.id)
    attempts = attempt_service.get_test_attempts(session, test_id, current_user.id)
    return TestAttempts(
        test=test_meta,
        attempts=[
            AttemptListItem(id=str(a.id), date=a.created_at, score=a.score)
            for a in attempts
        ],
    )


@router.get("/{attempt_id}", response_model=AttemptReview)
def get_attempt(
    attempt_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    """Review a recorded attempt with correct answers and per-question scores."""
    return attempt_service.get_attempt(session, attempt_id, user_id=current_user.id)


@router.post("", response_model=AttemptCreated)
def submit_attempt(
    payload: AttemptCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    """Score and record a submission."""
    return attempt_service.create_attempt(
        session, payload.test_id, current_user.id, payload.answers
    )
