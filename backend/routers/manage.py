"""Family room routes: artworks, publishing, invite link and guestbook moderation.

Everything under /api/manage requires a logged-in family member.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from backend.auth import CurrentSession, require_session
from backend.errors import busy, remote_failure
from backend.models.artwork import ArtworkResponse, DeleteArtworkResponse
from backend.models.invite import GuestbookEntry, InviteLinkResponse
from backend.remote.base import RemoteError
from backend.services.actions import (
    ActionInProgress,
    ActionTracker,
    artwork_key,
    invite_key,
)
from backend.services.artwork_service import (
    ArtworkNotFound,
    apply_action,
    delete_artwork,
    list_family_artworks,
    toggle_public,
)
from backend.services.invite_service import (
    delete_guestbook_entry,
    invite_link,
    list_guestbook,
    regenerate_invite,
)
from backend.services.profile_service import Profile, fetch_profile
from backend.services.visibility import ArtworkAction, InvalidTransition

router = APIRouter(prefix="/api/manage", tags=["manage"], dependencies=[Depends(require_session)])


def get_actions(request: Request) -> ActionTracker:
    return request.app.state.actions


async def family_profile(session: CurrentSession = Depends(require_session)) -> Profile:
    """The caller's profile; 404 when it has no family."""
    try:
        profile = await fetch_profile(session.remote, session.user_id)
    except RemoteError as e:
        raise remote_failure("프로필 조회 실패", e)
    if profile is None or not profile.family_id:
        raise HTTPException(status_code=404, detail="프로필 조회 실패: 가족 정보가 없어요.")
    return profile


def _transition_error(e: InvalidTransition) -> HTTPException:
    if e.action is ArtworkAction.EXTEND:
        return HTTPException(status_code=409, detail="만료된 경우에만 사용 가능")
    return HTTPException(status_code=409, detail=f"지금 상태({e.state.value})에서는 할 수 없어요.")


@router.get("")
async def family_room(
    q: str = Query(default=""),
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
):
    """Everything the family room shows: invite link and the family's artworks."""
    try:
        artworks = await list_family_artworks(session.remote, profile.family_id, q)
    except RemoteError as e:
        raise remote_failure("조회 실패", e)
    return {
        "family_id": profile.family_id,
        "invite_token": profile.invite_token,
        "invite_link": invite_link(profile.invite_token) if profile.invite_token else None,
        "artworks": [ArtworkResponse(**a) for a in artworks],
        "total": len(artworks),
    }


@router.post("/artworks/{artwork_id}/toggle", response_model=ArtworkResponse)
async def toggle_artwork(
    artwork_id: str,
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
    actions: ActionTracker = Depends(get_actions),
):
    """Publish a private artwork for the public window, or take it down."""
    try:
        async with actions.running(artwork_key(artwork_id)):
            return await toggle_public(session.remote, artwork_id, family_id=profile.family_id)
    except ActionInProgress:
        raise busy()
    except ArtworkNotFound:
        raise HTTPException(status_code=404, detail="작품을 찾을 수 없어요.")
    except InvalidTransition as e:
        raise _transition_error(e)
    except RemoteError as e:
        raise remote_failure("변경 실패", e)


@router.post("/artworks/{artwork_id}/extend", response_model=ArtworkResponse)
async def extend_artwork(
    artwork_id: str,
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
    actions: ActionTracker = Depends(get_actions),
):
    """Restart the public window of an expired artwork."""
    try:
        async with actions.running(artwork_key(artwork_id)):
            return await apply_action(
                session.remote, artwork_id, ArtworkAction.EXTEND, family_id=profile.family_id
            )
    except ActionInProgress:
        raise busy()
    except ArtworkNotFound:
        raise HTTPException(status_code=404, detail="작품을 찾을 수 없어요.")
    except InvalidTransition as e:
        raise _transition_error(e)
    except RemoteError as e:
        raise remote_failure("기간 연장 실패", e)


@router.delete("/artworks/{artwork_id}", response_model=DeleteArtworkResponse)
async def remove_artwork(
    artwork_id: str,
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
    actions: ActionTracker = Depends(get_actions),
):
    """Delete the photo and the artwork record."""
    try:
        async with actions.running(artwork_key(artwork_id)):
            return await delete_artwork(session.remote, artwork_id, family_id=profile.family_id)
    except ActionInProgress:
        raise busy()
    except ArtworkNotFound:
        raise HTTPException(status_code=404, detail="작품을 찾을 수 없어요.")
    except RemoteError as e:
        raise remote_failure("DB 삭제 실패", e)


# ── Invite link ──────────────────────────────────────────────────────────────

@router.post("/invite", response_model=InviteLinkResponse)
async def create_or_regenerate_invite(
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
    actions: ActionTracker = Depends(get_actions),
):
    """Generate the family's invite token, replacing any previous one."""
    try:
        async with actions.running(invite_key(profile.family_id)):
            token = await regenerate_invite(session.remote, profile)
    except ActionInProgress:
        raise busy()
    except RemoteError as e:
        raise remote_failure("초대코드 저장 실패", e)
    return InviteLinkResponse(invite_token=token, invite_link=invite_link(token))


# ── Guestbook moderation ─────────────────────────────────────────────────────

@router.get("/guestbook", response_model=list[GuestbookEntry])
async def family_guestbook(
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
):
    """Messages left through the family's current invite link."""
    if not profile.invite_token:
        return []
    try:
        return await list_guestbook(session.remote, profile.invite_token)
    except RemoteError as e:
        raise remote_failure("방명록 조회 실패", e)


@router.delete("/guestbook/{entry_id}")
async def remove_guestbook_entry(
    entry_id: str,
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
):
    try:
        await delete_guestbook_entry(session.remote, entry_id)
    except RemoteError as e:
        raise remote_failure("방명록 삭제 실패", e)
    return {"id": entry_id, "deleted": True}
