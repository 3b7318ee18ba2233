"""
Pydantic schemas for authentication requests and responses.

Credential fields are optional at the schema level: a missing username or
password is answered with 400 "Missing fields" by the router rather than a
422 validation error.
"""
from pydantic import BaseModel


class Credentials(BaseModel):
    """Body of /api/signup and /api/login."""
    username: str | None = None
    password: str | None = None


class AuthResponse(BaseModel):
    """Successful login or signup."""
    user: str


class SessionUser(BaseModel):
    username: str


class MeResponse(BaseModel):
    """Current session; ``user`` is null for anonymous visitors."""
    user: SessionUser | None = None


class SuccessResponse(BaseModel):
    success: bool = True
