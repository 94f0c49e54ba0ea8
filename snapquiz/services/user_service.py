import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from snapquiz.exceptions import NotFound, PersistenceError, ValidationError
from snapquiz.models import User

logger = logging.getLogger(__name__)

# bcrypt "2b" ident, compatible with bcrypt 4.x backends
PWD_CONTEXT = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__ident="2b")


def register_user(
    session: Session,
    username: str,
    email: str,
    first: str,
    last: str,
    password: str,
) -> User:
    """Create an account with a bcrypt password hash.

    Raises:
        ValidationError: If a field is blank or the username/email is taken
    """
    username = (username or "").strip()
    email = (email or "").strip().lower()
    first = (first or "").strip()
    last = (last or "").strip()
    if not all([username, email, first, last, password]):
        raise ValidationError("All fields are required")

    taken = session.exec(
        select(User).where((User.username == username) | (User.email == email))
    ).first()
    if taken:
        field = "username" if taken.username == username else "email"
        raise ValidationError(f"This {field} is already registered")

    user = User(
        username=username,
        email=email,
        first=first,
        last=last,
        password_hash=PWD_CONTEXT.hash(password),
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        # lost a race against a concurrent registration
        session.rollback()
        raise ValidationError("Username or email is already registered") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise PersistenceError("Failed to create user", cause=exc) from exc
    session.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")
    return user


def authenticate(session: Session, username: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, otherwise None."""
    user = session.exec(select(User).where(User.username == (username or "").strip())).first()
    if user is None or not PWD_CONTEXT.verify(password or "", user.password_hash):
        return None
    return user


def get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user
