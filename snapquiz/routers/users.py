from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from snapquiz.database import get_session
from snapquiz.deps import require_login
from snapquiz.models import User
from snapquiz.schemas import UserRead
from snapquiz.services import user_service

router = APIRouter()


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_login),
):
    """Users may only read their own record."""
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: user not authenticated",
        )
    return user_service.get_user(session, user_id)
