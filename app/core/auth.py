# app/core/auth.py
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import AuthenticationError
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository

ROLES = ("user", "admin")

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support "guest" mode (unauthenticated).
bearer_scheme = HTTPBearer(auto_error=False)

user_repo = UserRepository()


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token issued by the identity provider.

    Verification:
      - signature (AUTH_JWT_ALG using AUTH_JWT_SECRET)
      - expiration time (exp)
      - audience, only when AUTH_JWT_AUDIENCE is configured

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        AuthenticationError(401): if token is invalid/expired.
    """
    settings = get_settings()
    options = {"verify_aud": settings.AUTH_JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALG],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if the user has not
    completed their profile yet.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from the identity provider's JWT.

    Flow:
      1. If no Authorization header => guest => return None.
      2. Decode JWT => extract 'sub' and 'email' (+ optional role claim).
      3. Find user profile by subject.
      4. If missing, auto-provision a minimal profile.

    Returns:
        User instance if authenticated, else None for guests.

    Raises:
        AuthenticationError(401): if token is malformed or missing required claims.
    """
    if credentials is None:
        return None  # guest mode

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise AuthenticationError("Token missing sub/email")

    user = user_repo.get_by_id(session, str(sub))

    # Auto-provision profile if not found yet.
    # Role comes from the token claim when it names a known role,
    # otherwise "user" (admin can be promoted later).
    if user is None:
        claimed_role = payload.get(get_settings().AUTH_ROLE_CLAIM)
        user = User(
            id=str(sub),
            email=email,
            name=_default_name_from_email(email),
            role=claimed_role if claimed_role in ROLES else "user",
        )
        user = user_repo.create(session, user)

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    If attached to a route, guests (missing/invalid JWT)
    will be rejected with 401.
    """
    if user is None:
        raise AuthenticationError("Authentication required")
    return user

