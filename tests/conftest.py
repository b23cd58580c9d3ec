"""Shared test fixtures for all test modules."""

import os
from datetime import datetime, timedelta, timezone
from io import BytesIO

import pytest

# ── Environment overrides (must be set before importing backend modules) ─────
os.environ["ARTROOM_SUPABASE_URL"] = "http://remote.test"
os.environ["ARTROOM_SUPABASE_ANON_KEY"] = "pytest-anon-key"
os.environ["ARTROOM_JWT_SECRET"] = "pytest-jwt-secret"
os.environ["ARTROOM_BASE_URL"] = "http://artroom.test"
os.environ["ARTROOM_TIMEZONE"] = "Asia/Seoul"

from fake_remote import FAMILY_ID, USER_ID, FakeRemote  # noqa: E402


class Clock:
    """Controllable wall clock for expiry tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Starts at the current minute so code reading the real clock agrees with it."""
    return Clock(datetime.now(timezone.utc).replace(second=0, microsecond=0))


@pytest.fixture
def remote(clock):
    """An empty in-memory backend with one family member."""
    fake = FakeRemote(clock=clock)
    fake.add_user("mom@love.you", "correct-horse", user_id=USER_ID)
    fake.add_profile(USER_ID, FAMILY_ID)
    return fake


def make_image_bytes(fmt: str = "PNG", size=(64, 48)) -> bytes:
    from PIL import Image as PILImage

    buf = BytesIO()
    PILImage.new("RGB", size, color=(120, 200, 80)).save(buf, fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")
