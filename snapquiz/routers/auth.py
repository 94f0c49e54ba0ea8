"""Registration, login and logout with a signed session cookie."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlmodel import Session

from snapquiz.database import get_session
from snapquiz.schemas import LoginRequest, UserCreate, UserRead
from snapquiz.services import user_service

router = APIRouter()


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, session: Session = Depends(get_session)):
    return user_service.register_user(
        session,
        username=payload.username,
        email=payload.email,
        first=payload.first,
        last=payload.last,
        password=payload.password,
    )


@router.post("/login")
def login(request: Request, payload: LoginRequest, session: Session = Depends(get_session)):
    user = user_service.authenticate(session, payload.username, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    request.session.clear()
    request.session["user_id"] = user.id
    return {"message": "Logged in", "userId": user.id}


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}
