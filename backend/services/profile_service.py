"""Family profile lookup, keyed by ``profiles.user_id``."""

from dataclasses import dataclass

from backend.remote.base import RemoteBackend


@dataclass
class Profile:
    user_id: str
    family_id: str | None
    invite_token: str | None = None


async def fetch_profile(remote: RemoteBackend, user_id: str) -> Profile | None:
    """Read the caller's profile row. None when the user has no profile."""
    rows = await remote.select(
        "profiles",
        columns="user_id, family_id, invite_token",
        filters={"user_id": user_id},
        limit=1,
    )
    if not rows:
        return None
    row = rows[0]
    return Profile(
        user_id=user_id,
        family_id=row.get("family_id"),
        invite_token=row.get("invite_token") or None,
    )
