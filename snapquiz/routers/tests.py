"""Test generation, listing, reading and deletion routes."""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlmodel import Session

from snapquiz.ai_client import CompletionClient
from snapquiz.config import Settings, get_settings
from snapquiz.database import get_session
from snapquiz.deps import get_completion_client, require_login
from snapquiz.models import User
from snapquiz.schemas import TestDetail, TestGenerated, TestSummary
from snapquiz.services import test_service
from snapquiz.utils import extract_upload_text

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[TestSummary])
def list_tests(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    return test_service.list_tests(session, current_user.id)


@router.post("/generate", response_model=TestGenerated, status_code=status.HTTP_201_CREATED)
def generate_test(
    file: UploadFile = File(...),
    question_count: int = Form(5, alias="questionCount"),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
    completion_client: CompletionClient = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    """Generate a test from an uploaded text document and store it."""
    content = extract_upload_text(file.file.read(), file.filename, settings.max_upload_bytes)
    logger.info(f"Generating {question_count} questions from '{file.filename}' for user {current_user.id}")

    generated = completion_client.generate_test(content, question_count)
    test_id = test_service.save_generated_test(session, generated, current_user.id)
    return TestGenerated(test_id=test_id)


@router.get("/{test_id}", response_model=TestDetail)
def get_test(
    test_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    """A test's questions and options, without correct answers."""
    return test_service.get_test_questions(session, test_id, current_user.id)


@router.delete("/{test_id}")
def delete_test(
    test_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    test_service.delete_test(session, test_id, current_user.id)
    return {"success": True, "message": f"Successfully deleted test {test_id}"}
