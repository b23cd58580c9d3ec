"""Artwork upload: store the photo, then insert its record (always private)."""

import logging
import secrets
import time
from datetime import datetime

from backend.config import settings
from backend.remote.base import RemoteBackend, RemoteError
from backend.services.image_processor import content_type_for, get_image_dimensions, validate_image
from backend.services.made_at import resolve_made_at
from backend.services.visibility import to_iso

logger = logging.getLogger(__name__)


class UploadError(ValueError):
    """The upload request itself is unusable (missing fields, not an image)."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class RecordSaveError(RemoteError):
    """The image was stored but its artwork record could not be inserted."""

    def __init__(self, path: str, cause: RemoteError):
        super().__init__(cause.message, cause.status_code)
        self.path = path


def file_extension(filename: str | None) -> str:
    """Extension of the original file name, ``jpg`` when there is none."""
    name = (filename or "").strip()
    if "." not in name:
        return "jpg"
    ext = name.rsplit(".", 1)[1].strip().lower()
    return ext or "jpg"


def build_storage_path(filename: str | None, now_ms: int | None = None) -> str:
    """Unique object path: ``<epoch-millis>-<random-hex>.<ext>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{secrets.token_hex(6)}.{file_extension(filename)}"


async def upload_artwork(
    remote: RemoteBackend,
    family_id: str,
    kid_name: str,
    title: str,
    filename: str | None,
    data: bytes,
    use_now: bool = True,
    made_at_text: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Store the file and insert the artwork record.

    Raises MadeAtError for a rejected "made at" value and UploadError for
    unusable input; both happen before anything is written. If the insert
    fails after the file was stored, RecordSaveError is raised and the stored
    object is left behind.
    """
    kid_name = (kid_name or "").strip()
    title = (title or "").strip()
    if not kid_name or not title or not data:
        raise UploadError("아이 이름, 제목, 사진 파일을 입력해줘.")
    if len(data) > settings.max_upload_size_bytes:
        raise UploadError(
            f"파일이 너무 커요 (최대 {settings.max_upload_size_mb}MB)", status_code=413
        )
    if not validate_image(data):
        raise UploadError("이미지 파일이 아니에요.")

    made_at = resolve_made_at(use_now, made_at_text, now=now)

    path = build_storage_path(filename)
    await remote.upload(settings.storage_bucket, path, data, content_type_for(data))
    url = remote.public_url(settings.storage_bucket, path)
    logger.info("Stored artwork image %s (%s bytes, %s)", path, len(data), get_image_dimensions(data))

    try:
        record = await remote.insert(
            "artworks",
            {
                "family_id": family_id,
                "kid_name": kid_name,
                "title": title,
                "private_image_path": url,
                "public_image_path": url,
                "is_public": False,
                "artwork_made_at": to_iso(made_at),
            },
        )
    except RemoteError as e:
        logger.error("Artwork insert failed; stored object %s is orphaned: %s", path, e.message)
        raise RecordSaveError(path, e) from e

    logger.info("Uploaded artwork %s for family %s", record.get("id"), family_id)
    return record
