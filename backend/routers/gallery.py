"""Public gallery route: artworks currently inside their public window."""

from fastapi import APIRouter, Depends

from backend.auth import CurrentSession, require_session
from backend.errors import remote_failure
from backend.models.artwork import GalleryResponse
from backend.remote.base import RemoteError
from backend.services.artwork_service import list_public_gallery

router = APIRouter(prefix="/api/gallery", tags=["gallery"])


@router.get("", response_model=GalleryResponse)
async def gallery(session: CurrentSession = Depends(require_session)):
    """Published artworks for members, newest first, with days left."""
    try:
        items = await list_public_gallery(session.remote)
    except RemoteError as e:
        raise remote_failure("조회 실패", e)
    return GalleryResponse(artworks=items, total=len(items))
