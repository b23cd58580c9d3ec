"""Tests for core ArtRoom pieces: config, auth helpers, action tracking, error mapping."""

import pytest

# Environment overrides are set in conftest.py (runs before this module).
# The settings singleton is created once at import time of backend.config.


# ── Config Tests ─────────────────────────────────────────────────────────────


class TestConfig:
    def test_settings_loaded(self):
        from backend.config import settings
        assert settings.jwt_secret == "pytest-jwt-secret"
        assert settings.base_url == "http://artroom.test"

    def test_defaults(self):
        from backend.config import settings
        assert settings.public_window_days == 14
        assert settings.invite_token_length == 28
        assert settings.storage_bucket == "artworks"
        assert settings.login_email_domain == "love.you"

    def test_max_upload_size_bytes(self):
        from backend.config import settings
        assert settings.max_upload_size_bytes == settings.max_upload_size_mb * 1024 * 1024


# ── Auth Tests ───────────────────────────────────────────────────────────────


class TestAuth:
    def test_username_to_email(self):
        from backend.auth import username_to_email
        assert username_to_email("Mom") == "mom@love.you"
        assert username_to_email("  kid.one_2-x ") == "kid.one_2-x@love.you"

    @pytest.mark.parametrize("username", ["", "ab", "a" * 31, "has space", "한글이름", "me@home"])
    def test_username_rejected(self, username):
        from backend.auth import InvalidUsername, username_to_email
        with pytest.raises(InvalidUsername):
            username_to_email(username)

    def test_decode_token(self):
        from jose import jwt
        from backend.auth import decode_token
        token = jwt.encode({"sub": "u1", "aud": "authenticated"}, "pytest-jwt-secret", algorithm="HS256")
        assert decode_token(token)["sub"] == "u1"

    def test_invalid_token_raises(self):
        from jose import JWTError
        from backend.auth import decode_token
        with pytest.raises(JWTError):
            decode_token("not.a.valid.token")

    def test_wrong_audience_fails(self):
        """Tokens minted for another audience are not sessions."""
        from jose import JWTError, jwt
        from backend.auth import decode_token
        token = jwt.encode({"sub": "u1", "aud": "anon"}, "pytest-jwt-secret", algorithm="HS256")
        with pytest.raises(JWTError):
            decode_token(token)

    @pytest.mark.asyncio
    async def test_remote_lookup_without_secret(self, remote, monkeypatch):
        from backend.auth import user_id_for_token
        from backend.config import settings

        monkeypatch.setattr(settings, "jwt_secret", "")
        assert await user_id_for_token(remote, "token-user-1") == "user-1"
        assert await user_id_for_token(remote, "garbage") is None
        assert remote.called("get_user")


# ── Action Tracker Tests ─────────────────────────────────────────────────────


class TestActionTracker:
    def test_begin_and_end(self):
        from backend.services.actions import ActionInProgress, ActionTracker
        tracker = ActionTracker()
        tracker.begin_action("artwork:1")
        assert tracker.is_busy("artwork:1")
        assert not tracker.is_busy("artwork:2")
        with pytest.raises(ActionInProgress):
            tracker.begin_action("artwork:1")
        tracker.end_action("artwork:1")
        assert not tracker.is_busy("artwork:1")

    @pytest.mark.asyncio
    async def test_running_releases_on_error(self):
        from backend.services.actions import ActionTracker
        tracker = ActionTracker()
        with pytest.raises(RuntimeError):
            async with tracker.running("invite:f1"):
                assert tracker.is_busy("invite:f1")
                raise RuntimeError("remote call failed")
        assert not tracker.is_busy("invite:f1")

    def test_keys(self):
        from backend.services.actions import artwork_key, invite_key
        assert artwork_key("a1") == "artwork:a1"
        assert invite_key("f1") == "invite:f1"
        assert artwork_key("x") != invite_key("x")


# ── Error Mapping Tests ──────────────────────────────────────────────────────


class TestErrors:
    def test_client_error_passes_through(self):
        from backend.errors import remote_failure
        from backend.remote.base import RemoteError
        exc = remote_failure("삭제 실패", RemoteError("permission denied", 403))
        assert exc.status_code == 403
        assert exc.detail == "삭제 실패: permission denied"

    def test_server_and_network_errors_are_502(self):
        from backend.errors import remote_failure
        from backend.remote.base import RemoteError
        assert remote_failure("x", RemoteError("boom", 500)).status_code == 502
        assert remote_failure("x", RemoteError("timed out")).status_code == 502

    def test_busy(self):
        from backend.errors import busy
        exc = busy()
        assert exc.status_code == 409
        assert exc.detail == "처리 중"
