"""Authentication: sessions are issued by the hosted auth service.

This module only maps usernames to login emails and checks the bearer
access token on incoming requests.
"""

import re
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt

from backend.config import settings
from backend.remote.base import RemoteBackend, RemoteError
from backend.remote.lifecycle import get_remote

ALGORITHM = "HS256"

USERNAME_PATTERN = re.compile(r"^[a-z0-9._-]{3,30}$")


class InvalidUsername(ValueError):
    pass


@dataclass
class CurrentSession:
    user_id: str
    access_token: str
    remote: RemoteBackend


def username_to_email(username: str) -> str:
    """Map a login id onto the fixed login email domain."""
    u = (username or "").strip().lower()
    if not USERNAME_PATTERN.match(u):
        raise InvalidUsername("아이디는 영문/숫자/._- 만 가능하며 3~30자로 입력해줘.")
    return f"{u}@{settings.login_email_domain}"


def decode_token(token: str) -> dict:
    """Decode and validate an access token. Raises JWTError on failure."""
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[ALGORITHM],
        audience=settings.jwt_audience,
    )


def bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


async def user_id_for_token(remote: RemoteBackend, token: str) -> str | None:
    """Identify the user behind an access token, or None if it is not valid.

    With ``jwt_secret`` configured the token is verified locally; otherwise
    the auth service is asked.
    """
    if settings.jwt_secret:
        try:
            return decode_token(token).get("sub")
        except JWTError:
            return None
    try:
        user = await remote.get_user(token)
    except RemoteError:
        return None
    return user.get("id")


async def optional_session(
    request: Request, remote: RemoteBackend = Depends(get_remote)
) -> CurrentSession | None:
    token = bearer_token(request)
    if not token:
        return None
    user_id = await user_id_for_token(remote, token)
    if not user_id:
        return None
    return CurrentSession(user_id=user_id, access_token=token, remote=remote.as_user(token))


async def require_session(
    session: CurrentSession | None = Depends(optional_session),
) -> CurrentSession:
    """FastAPI dependency that enforces a logged-in user.

    The front end answers 401 ``login_required`` by going to /login.
    """
    if session is None:
        raise HTTPException(status_code=401, detail="login_required")
    return session
