"""Pydantic models for invite links and the guestbook."""

from typing import Literal

from pydantic import BaseModel, Field


class GuestbookEntry(BaseModel):
    id: str
    display_name: str
    content: str
    created_at: str | None = None


class GuestbookCreate(BaseModel):
    display_name: str = Field(..., max_length=50)
    content: str = Field(..., max_length=1000)


class InviteArtwork(BaseModel):
    id: str
    kid_name: str
    title: str
    image_url: str
    created_at: str | None = None
    artwork_made_at: str | None = None


class InviteView(BaseModel):
    status: Literal["ok", "empty", "invalid"]
    message: str = ""
    artworks: list[InviteArtwork] = []
    entries: list[GuestbookEntry] = []


class InviteLinkResponse(BaseModel):
    invite_token: str | None = None
    invite_link: str | None = None
