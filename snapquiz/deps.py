"""Shared FastAPI dependencies for database access, authentication and generation."""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from snapquiz.ai_client import CompletionClient
from snapquiz.config import Settings, get_settings
from snapquiz.database import get_session
from snapquiz.models import User


def get_current_user(
    request: Request, session: Session = Depends(get_session)
) -> Optional[User]:
    """Return the currently logged-in user based on the session cookie, if any."""
    user_id = request.session.get("user_id")
    if not user_id:
        return None

    user = session.get(User, user_id)
    if not user:
        # Clear any stale session
        request.session.clear()
        return None
    return user


def require_login(current_user: Optional[User] = Depends(get_current_user)) -> User:
    """Ensure that a user is logged in; otherwise respond 401."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: user not authenticated",
        )
    return current_user


def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    return CompletionClient(settings)
