"""Upload routes: artwork upload and "made at" input checking."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from backend.auth import CurrentSession, require_session
from backend.errors import remote_failure
from backend.models.artwork import MadeAtCheck
from backend.remote.base import RemoteError
from backend.routers.manage import family_profile
from backend.services.made_at import (
    MadeAtError,
    default_made_at_input,
    local_zone,
    parse_made_at,
)
from backend.services.profile_service import Profile
from backend.services.upload_service import RecordSaveError, UploadError, upload_artwork
from backend.services.visibility import to_iso

router = APIRouter(prefix="/api/upload", tags=["upload"], dependencies=[Depends(require_session)])


@router.get("/made-at", response_model=MadeAtCheck)
async def check_made_at(value: str | None = Query(default=None)):
    """Validate a "made at" input. Without ``value``, returns the prefill."""
    if value is None:
        value = default_made_at_input()
    try:
        parsed = parse_made_at(value)
    except MadeAtError as e:
        return MadeAtCheck(value=value, valid=False, error=str(e))
    return MadeAtCheck(value=value, valid=True, normalized=to_iso(parsed.replace(tzinfo=local_zone())))


@router.post("")
async def upload(
    file: UploadFile = File(...),
    kid_name: str = Form(...),
    title: str = Form(...),
    use_now: bool = Form(default=True),
    made_at: str = Form(default=""),
    session: CurrentSession = Depends(require_session),
    profile: Profile = Depends(family_profile),
):
    """Upload one artwork photo. The new artwork is always private."""
    data = await file.read()
    try:
        record = await upload_artwork(
            session.remote,
            family_id=profile.family_id,
            kid_name=kid_name,
            title=title,
            filename=file.filename,
            data=data,
            use_now=use_now,
            made_at_text=made_at,
        )
    except MadeAtError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except RecordSaveError as e:
        raise remote_failure("DB 저장 실패", e)
    except RemoteError as e:
        raise remote_failure("업로드 실패", e)
    return {"artwork": record, "redirect_to": "/manage"}
