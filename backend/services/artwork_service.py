"""Artwork queries and mutations: family room listing, publishing, deletion, gallery."""

import logging
from datetime import datetime
from urllib.parse import unquote, urlparse

from backend.config import settings
from backend.remote.base import RemoteBackend, RemoteError
from backend.services.visibility import (
    ArtworkAction,
    ArtworkState,
    compute_state,
    describe,
    plan_transition,
    utcnow,
)

logger = logging.getLogger(__name__)

FAMILY_COLUMNS = (
    "id, family_id, kid_name, title, private_image_path, created_at, "
    "is_public, public_until, artwork_made_at"
)
GALLERY_COLUMNS = (
    "id, kid_name, title, public_image_path, private_image_path, "
    "created_at, is_public, public_until"
)


class ArtworkNotFound(Exception):
    pass


def with_state(row: dict, now: datetime | None = None) -> dict:
    """Artwork row plus its derived visibility fields."""
    return {**row, **describe(row, now)}


def matches_query(row: dict, query: str) -> bool:
    q = query.strip().lower()
    if not q:
        return True
    return q in (row.get("kid_name") or "").lower() or q in (row.get("title") or "").lower()


async def list_family_artworks(
    remote: RemoteBackend,
    family_id: str,
    query: str = "",
    now: datetime | None = None,
) -> list[dict]:
    """The family's artworks, newest first, optionally filtered by kid name or title."""
    rows = await remote.select(
        "artworks",
        columns=FAMILY_COLUMNS,
        filters={"family_id": family_id},
        order="created_at",
        descending=True,
        limit=settings.gallery_limit,
    )
    now = now or utcnow()
    return [with_state(r, now) for r in rows if matches_query(r, query)]


async def get_artwork(
    remote: RemoteBackend, artwork_id: str, family_id: str | None = None
) -> dict:
    """One artwork; restricted to ``family_id`` when given."""
    filters = {"id": artwork_id}
    if family_id:
        filters["family_id"] = family_id
    rows = await remote.select("artworks", columns=FAMILY_COLUMNS, filters=filters, limit=1)
    if not rows:
        raise ArtworkNotFound(artwork_id)
    return rows[0]


async def apply_action(
    remote: RemoteBackend,
    artwork_id: str,
    action: ArtworkAction,
    now: datetime | None = None,
    family_id: str | None = None,
) -> dict:
    """Run one state-machine transition and return the re-read artwork.

    Raises InvalidTransition before writing anything if the action is not
    offered for the current state.
    """
    now = now or utcnow()
    artwork = await get_artwork(remote, artwork_id, family_id)
    patch = plan_transition(artwork, action, now)
    await remote.update("artworks", patch, {"id": artwork_id})
    logger.info("Artwork %s: %s -> %s", artwork_id, action.value, patch)
    return with_state(await get_artwork(remote, artwork_id, family_id), now)


async def toggle_public(
    remote: RemoteBackend,
    artwork_id: str,
    now: datetime | None = None,
    family_id: str | None = None,
) -> dict:
    """Publish a private artwork, or un-publish a public (active or expired) one."""
    artwork = await get_artwork(remote, artwork_id, family_id)
    action = (
        ArtworkAction.PUBLISH
        if compute_state(artwork, now) is ArtworkState.PRIVATE
        else ArtworkAction.UNPUBLISH
    )
    return await apply_action(remote, artwork_id, action, now, family_id)


def storage_path_from_image(image_ref: str | None) -> str:
    """Recover the bucket-relative object path from a stored image reference.

    The reference may be a bare path or a full public URL.
    """
    raw = (image_ref or "").strip()
    if not raw:
        return ""
    if not raw.startswith(("http://", "https://")):
        return raw

    path = urlparse(raw).path
    marker = f"/{settings.storage_bucket}/"
    idx = path.find(marker)
    if idx >= 0:
        return unquote(path[idx + len(marker):])
    return unquote(path.rsplit("/", 1)[-1])


async def delete_artwork(
    remote: RemoteBackend, artwork_id: str, family_id: str | None = None
) -> dict:
    """Delete the stored image, then the record.

    A storage failure does not stop the record deletion; it is reported as a
    warning in the result. A record deletion failure raises RemoteError.
    """
    artwork = await get_artwork(remote, artwork_id, family_id)
    warning = None

    storage_path = storage_path_from_image(artwork.get("private_image_path"))
    if storage_path:
        try:
            await remote.remove(settings.storage_bucket, [storage_path])
        except RemoteError as e:
            logger.warning("Storage removal failed for %s (%s): %s", artwork_id, storage_path, e.message)
            warning = f"사진 삭제 실패(그래도 DB는 지울게): {e.message}"
    else:
        logger.warning("No storage path for artwork %s; deleting record only", artwork_id)
        warning = "사진 경로를 못 찾아서 DB만 지울게요."

    await remote.delete("artworks", {"id": artwork_id})
    logger.info("Deleted artwork %s", artwork_id)
    return {"id": artwork_id, "deleted": True, "warning": warning}


async def list_public_gallery(remote: RemoteBackend, now: datetime | None = None) -> list[dict]:
    """Artworks currently inside their public window, newest first.

    The expiry sweep is best-effort. Visibility itself is decided by
    ``compute_state``, the same predicate the family room and invite view
    use, so the sweep's outcome does not matter. A public row without
    ``public_until`` stays visible.
    """
    now = now or utcnow()
    try:
        await remote.rpc("expire_public_artworks")
    except RemoteError as e:
        logger.warning("expire_public_artworks failed (ignored): %s", e.message)

    rows = await remote.select(
        "artworks",
        columns=GALLERY_COLUMNS,
        filters={"is_public": True},
        order="created_at",
        descending=True,
        limit=settings.gallery_limit,
    )
    items = []
    for row in rows:
        if compute_state(row, now) is not ArtworkState.PUBLIC_ACTIVE:
            continue
        item = with_state(row, now)
        item["image_url"] = row.get("public_image_path") or row.get("private_image_path") or ""
        items.append(item)
    return items
