"""Session authentication endpoints: signup, login, logout, me."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.auth.dependencies import get_optional_current_user
from api.auth.schemas import AuthResponse, Credentials, MeResponse, SessionUser, SuccessResponse
from api.auth.security import create_session_token, get_password_hash, verify_password
from api.config import AUTH_RATE_LIMIT, MAX_USERNAME_LENGTH
from api.database import get_db
from api.limiter import limiter
from api.models import User
from api.settings import settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Auth"])


def _normalize_username(username: Optional[str]) -> str:
    return (username or "").strip().lower()


def _set_session_cookie(response: Response, user: User) -> None:
    token = create_session_token(user.id, user.username)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="none" if settings.session_cookie_secure else "lax",
    )


@router.post("/signup", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def signup(
    request: Request,
    response: Response,
    credentials: Credentials,
    db: Session = Depends(get_db)
):
    """Create an account and start a session for it."""
    username = _normalize_username(credentials.username)
    if not username or not credentials.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fields")
    if len(username) > MAX_USERNAME_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username too long")

    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(username=username, hashed_password=get_password_hash(credentials.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    db.refresh(user)

    _set_session_cookie(response, user)
    logger.info(f"User {user.id} signed up as {username}")
    return AuthResponse(user=user.username)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    credentials: Credentials,
    db: Session = Depends(get_db)
):
    """Start a session for an existing account."""
    username = _normalize_username(credentials.username)
    user = db.query(User).filter(User.username == username).first() if username else None

    if user is None or not credentials.password or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    _set_session_cookie(response, user)
    logger.info(f"User {user.id} logged in")
    return AuthResponse(user=user.username)


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response):
    """End the session by clearing the cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="none" if settings.session_cookie_secure else "lax",
    )
    return SuccessResponse()


@router.get("/me", response_model=MeResponse)
async def me(current_user: Optional[User] = Depends(get_optional_current_user)):
    """Who is logged in, if anyone."""
    if current_user is None:
        return MeResponse(user=None)
    return MeResponse(user=SessionUser(username=current_user.username))
