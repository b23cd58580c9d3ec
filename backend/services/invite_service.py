"""Family invite links: token generation, resolution and the guestbook.

An invite token is a bearer capability. Whoever holds the link may view the
family's public artworks and write to its guestbook; no further identity is
checked. Only the family itself (authenticated) may delete entries.

Each family has at most one token, stored on its profile row. Regenerating
overwrites it, so the previous link stops working immediately. Tokens do
not expire.
"""

import asyncio
import logging
import secrets
from datetime import datetime

from backend.config import settings
from backend.remote.base import RemoteBackend, RemoteError
from backend.services.profile_service import Profile
from backend.services.visibility import ArtworkState, compute_state, utcnow

logger = logging.getLogger(__name__)

# 57 symbols: letters and digits without the easily confused I, O, l, 0, 1
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"
MIN_TOKEN_LENGTH = 24
MAX_TOKEN_LENGTH = 28

# Anything shorter is rejected without asking the backend
MIN_RESOLVABLE_LENGTH = 6


class InvalidInvite(Exception):
    """The invite link is missing, malformed or does not resolve to a family."""


class GuestbookInputError(ValueError):
    """Guestbook name or message is empty."""


def make_token(length: int | None = None) -> str:
    """Generate a random invite token from INVITE_ALPHABET."""
    if length is None:
        length = settings.invite_token_length
    if not MIN_TOKEN_LENGTH <= length <= MAX_TOKEN_LENGTH:
        raise ValueError(
            f"Invite token length must be {MIN_TOKEN_LENGTH}-{MAX_TOKEN_LENGTH}, got {length}"
        )
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(length))


def invite_link(token: str) -> str:
    return f"{settings.base_url.rstrip('/')}/invite/{token}"


async def regenerate_invite(remote: RemoteBackend, profile: Profile) -> str:
    """Create or replace the family's invite token. Returns the new token."""
    if not profile.family_id:
        raise RemoteError("profiles 정보 없음")

    token = make_token()
    rows = await remote.upsert(
        "profiles",
        {"user_id": profile.user_id, "family_id": profile.family_id, "invite_token": token},
        on_conflict="user_id",
    )
    if not rows or rows[0].get("invite_token") != token:
        raise RemoteError("저장 결과 확인 실패")

    logger.info("Regenerated invite token for family %s", profile.family_id)
    return token


def image_url(remote: RemoteBackend, row: dict) -> str:
    """Displayable URL for an artwork row; bare storage paths become public URLs."""
    value = (row.get("private_image_path") or "").strip()
    if not value:
        return ""
    if value.startswith(("http://", "https://")):
        return value
    return remote.public_url(settings.storage_bucket, value)


def _artwork_view(remote: RemoteBackend, row: dict) -> dict:
    return {
        "id": row["id"],
        "kid_name": row.get("kid_name", ""),
        "title": row.get("title", ""),
        "image_url": image_url(remote, row),
        "created_at": row.get("created_at"),
        "artwork_made_at": row.get("artwork_made_at"),
    }


def _check_token(token: str | None) -> str:
    token = (token or "").strip()
    if len(token) < MIN_RESOLVABLE_LENGTH:
        raise InvalidInvite(f"invalid or missing token: {token!r}")
    return token


async def list_guestbook(remote: RemoteBackend, token: str) -> list[dict]:
    return await remote.rpc("get_guestbook_entries_by_token", {"p_token": token}) or []


async def resolve_invite(
    remote: RemoteBackend, token: str | None, now: datetime | None = None
) -> dict:
    """Resolve a token to the family's visible artworks and guestbook.

    Short tokens fail before any remote call. If either lookup fails, the
    link is treated as invalid.
    """
    token = _check_token(token)

    artworks_res, entries_res = await asyncio.gather(
        remote.rpc("get_artworks_by_token", {"p_token": token}),
        list_guestbook(remote, token),
        return_exceptions=True,
    )
    for res in (artworks_res, entries_res):
        if isinstance(res, RemoteError):
            logger.info("Invite lookup failed: %s", res.message)
            raise InvalidInvite(res.message) from res
        if isinstance(res, BaseException):
            raise res

    now = now or utcnow()
    artworks = [
        _artwork_view(remote, row)
        for row in artworks_res or []
        if "is_public" not in row or compute_state(row, now) is ArtworkState.PUBLIC_ACTIVE
    ]
    return {"artworks": artworks, "entries": list(entries_res or [])}


async def add_guestbook_entry(
    remote: RemoteBackend, token: str, display_name: str, content: str
) -> dict:
    """Leave a message through an invite link. Returns the stored entry."""
    name = (display_name or "").strip()
    body = (content or "").strip()
    if not name or not body:
        raise GuestbookInputError("이름과 내용을 입력해 주세요.")
    token = _check_token(token)

    entry = await remote.rpc(
        "add_guestbook_entry",
        {"p_token": token, "p_display_name": name, "p_content": body},
    )
    if isinstance(entry, list):
        entry = entry[0] if entry else None
    if not entry:
        raise RemoteError("방명록 등록 결과가 비어 있어요.")
    return entry


async def delete_guestbook_entry(remote: RemoteBackend, entry_id: str) -> None:
    await remote.rpc("delete_guestbook_entry", {"p_id": entry_id})
    logger.info("Deleted guestbook entry %s", entry_id)
