"""
FastAPI dependencies for session authentication.

The session cookie carries a signed token whose subject is the user id.

Usage:
    @router.get("/protected")
    async def protected_route(user: User = Depends(get_current_user)):
        return {"message": f"Hello, {user.username}"}
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from api.auth.security import decode_session_token
from api.database import get_db
from api.models import User
from api.settings import settings


def _user_from_cookie(request: Request, db: Session) -> Optional[User]:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    payload = decode_session_token(token)
    if payload is None:
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    return db.query(User).filter(User.id == user_id).first()


async def get_optional_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> Optional[User]:
    """The logged-in user, or None for anonymous or invalid sessions."""
    return _user_from_cookie(request, db)


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    """
    Get the current authenticated user from the session cookie.

    Raises:
        HTTPException 401: If the cookie is missing, invalid, expired, or the
            user no longer exists
    """
    user = _user_from_cookie(request, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
        )
    return user
