"""Authentication routes: login, session status, logout, change password."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from backend.auth import (
    CurrentSession,
    InvalidUsername,
    optional_session,
    require_session,
    username_to_email,
)
from backend.errors import remote_failure
from backend.remote.base import RemoteBackend, RemoteError
from backend.remote.lifecycle import get_remote

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

MIN_PASSWORD_LENGTH = 8


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    user_id: str | None


class SessionStatus(BaseModel):
    authenticated: bool
    user_id: str | None = None


class ChangePasswordRequest(BaseModel):
    password: str
    password_confirm: str


@router.post("/api/auth/login", response_model=SessionResponse)
async def login(req: LoginRequest, remote: RemoteBackend = Depends(get_remote)):
    """Log in with a username and password; returns the auth service's session."""
    try:
        email = username_to_email(req.username)
    except InvalidUsername as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        session = await remote.sign_in_with_password(email, req.password)
    except RemoteError as e:
        logger.info("Login failed for %s: %s", email, e.message)
        raise HTTPException(status_code=401, detail="로그인 실패: 아이디/비밀번호를 확인해줘.")

    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=session.user_id,
    )


@router.get("/api/auth/session", response_model=SessionStatus)
async def session_status(session: CurrentSession | None = Depends(optional_session)):
    """Whether the bearer token is a live session. Always accessible."""
    if session is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, user_id=session.user_id)


@router.post("/api/auth/logout")
async def logout(
    session: CurrentSession = Depends(require_session),
    remote: RemoteBackend = Depends(get_remote),
):
    try:
        await remote.sign_out(session.access_token)
    except RemoteError as e:
        raise remote_failure("로그아웃 실패", e)
    return {"message": "logged_out"}


@router.post("/api/account/password")
async def change_password(
    req: ChangePasswordRequest,
    session: CurrentSession = Depends(require_session),
    remote: RemoteBackend = Depends(get_remote),
):
    """Change the logged-in user's password."""
    if len(req.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="비밀번호는 8자 이상 권장")
    if req.password != req.password_confirm:
        raise HTTPException(status_code=400, detail="비밀번호가 일치하지 않습니다.")

    try:
        await remote.update_user(session.access_token, {"password": req.password})
    except RemoteError as e:
        raise remote_failure("변경 실패", e)

    logger.info("Password changed for user %s", session.user_id)
    return {"message": "비밀번호가 변경되었습니다."}
