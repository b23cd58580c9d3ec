"""Pydantic models for artworks."""

from pydantic import BaseModel


class ArtworkResponse(BaseModel):
    id: str
    kid_name: str
    title: str
    private_image_path: str | None = None
    public_image_path: str | None = None
    image_url: str | None = None
    created_at: str | None = None
    artwork_made_at: str | None = None
    is_public: bool = False
    public_until: str | None = None
    state: str
    days_left: int | None = None
    days_left_label: str = ""
    can_extend: bool = False
    actions: list[str] = []


class DeleteArtworkResponse(BaseModel):
    id: str
    deleted: bool
    warning: str | None = None


class GalleryResponse(BaseModel):
    artworks: list[ArtworkResponse]
    total: int


class MadeAtCheck(BaseModel):
    value: str
    valid: bool
    error: str | None = None
    normalized: str | None = None
