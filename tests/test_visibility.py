"""Tests for the artwork visibility/expiry state machine."""

from datetime import datetime, timedelta, timezone

import pytest

from backend.services.visibility import (
    ArtworkAction,
    ArtworkState,
    InvalidTransition,
    available_actions,
    can_extend,
    compute_state,
    days_left,
    days_left_label,
    describe,
    parse_timestamp,
    plan_transition,
    to_iso,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _art(is_public=False, until=None):
    return {"id": "a1", "is_public": is_public, "public_until": to_iso(until) if until else None}


# ── State derivation ─────────────────────────────────────────────────────────


class TestComputeState:
    def test_private(self):
        assert compute_state(_art(), NOW) is ArtworkState.PRIVATE

    def test_private_ignores_stale_until(self):
        art = _art(is_public=False, until=NOW + timedelta(days=3))
        assert compute_state(art, NOW) is ArtworkState.PRIVATE

    def test_public_active(self):
        art = _art(is_public=True, until=NOW + timedelta(days=3))
        assert compute_state(art, NOW) is ArtworkState.PUBLIC_ACTIVE

    def test_public_expired(self):
        art = _art(is_public=True, until=NOW - timedelta(seconds=1))
        assert compute_state(art, NOW) is ArtworkState.PUBLIC_EXPIRED

    def test_boundary_is_expired(self):
        """public_until equal to now counts as expired."""
        art = _art(is_public=True, until=NOW)
        assert compute_state(art, NOW) is ArtworkState.PUBLIC_EXPIRED

    def test_public_without_until_is_active(self):
        assert compute_state(_art(is_public=True), NOW) is ArtworkState.PUBLIC_ACTIVE

    def test_parses_z_suffix(self):
        art = {"is_public": True, "public_until": "2024-05-02T00:00:00Z"}
        assert compute_state(art, NOW) is ArtworkState.PUBLIC_ACTIVE


class TestParseTimestamp:
    def test_naive_is_utc(self):
        dt = parse_timestamp("2024-05-01T12:00:00")
        assert dt == NOW

    def test_offset(self):
        dt = parse_timestamp("2024-05-01T21:00:00+09:00")
        assert dt == NOW

    def test_garbage(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None


# ── Countdown ────────────────────────────────────────────────────────────────


class TestDaysLeft:
    def test_rounds_up(self):
        assert days_left(NOW + timedelta(days=2, hours=1), NOW) == 3

    def test_exact_days(self):
        assert days_left(NOW + timedelta(days=14), NOW) == 14

    def test_less_than_a_day(self):
        assert days_left(NOW + timedelta(hours=2), NOW) == 1

    def test_day_and_a_half(self):
        assert days_left(NOW + timedelta(hours=36), NOW) == 2
        assert days_left_label(days_left(NOW + timedelta(hours=36), NOW)) == "2일 남음"

    def test_past_is_not_positive(self):
        assert days_left(NOW - timedelta(hours=30), NOW) <= 0

    def test_missing(self):
        assert days_left(None, NOW) is None

    def test_labels(self):
        assert days_left_label(3) == "3일 남음"
        assert days_left_label(1) == "1일 남음"
        assert days_left_label(0) == "오늘 종료"
        assert days_left_label(-2) == "오늘 종료"
        assert days_left_label(None) == ""


# ── Transitions ──────────────────────────────────────────────────────────────


class TestTransitions:
    def test_actions_per_state(self):
        assert available_actions(ArtworkState.PRIVATE) == {ArtworkAction.PUBLISH, ArtworkAction.DELETE}
        assert available_actions(ArtworkState.PUBLIC_ACTIVE) == {
            ArtworkAction.UNPUBLISH,
            ArtworkAction.DELETE,
        }
        assert available_actions(ArtworkState.PUBLIC_EXPIRED) == {
            ArtworkAction.EXTEND,
            ArtworkAction.UNPUBLISH,
            ArtworkAction.DELETE,
        }

    def test_publish_sets_window(self):
        patch = plan_transition(_art(), ArtworkAction.PUBLISH, NOW)
        assert patch["is_public"] is True
        assert parse_timestamp(patch["public_until"]) == NOW + timedelta(days=14)

    def test_unpublish_clears_until(self):
        art = _art(is_public=True, until=NOW + timedelta(days=5))
        assert plan_transition(art, ArtworkAction.UNPUBLISH, NOW) == {
            "is_public": False,
            "public_until": None,
        }

    def test_unpublish_expired(self):
        art = _art(is_public=True, until=NOW - timedelta(days=1))
        patch = plan_transition(art, ArtworkAction.UNPUBLISH, NOW)
        assert patch["is_public"] is False

    def test_extend_expired_restarts_window(self):
        art = _art(is_public=True, until=NOW - timedelta(days=3))
        patch = plan_transition(art, ArtworkAction.EXTEND, NOW)
        assert "is_public" not in patch
        assert parse_timestamp(patch["public_until"]) == NOW + timedelta(days=14)

    def test_extend_active_rejected(self):
        art = _art(is_public=True, until=NOW + timedelta(days=3))
        with pytest.raises(InvalidTransition) as exc:
            plan_transition(art, ArtworkAction.EXTEND, NOW)
        assert exc.value.state is ArtworkState.PUBLIC_ACTIVE

    def test_extend_private_rejected(self):
        with pytest.raises(InvalidTransition):
            plan_transition(_art(), ArtworkAction.EXTEND, NOW)

    def test_publish_public_rejected(self):
        art = _art(is_public=True, until=NOW + timedelta(days=3))
        with pytest.raises(InvalidTransition):
            plan_transition(art, ArtworkAction.PUBLISH, NOW)

    def test_delete_has_no_patch(self):
        with pytest.raises(InvalidTransition):
            plan_transition(_art(), ArtworkAction.DELETE, NOW)

    def test_can_extend_only_when_expired(self):
        assert can_extend(_art(is_public=True, until=NOW - timedelta(minutes=1)), NOW)
        assert not can_extend(_art(is_public=True, until=NOW + timedelta(minutes=1)), NOW)
        assert not can_extend(_art(), NOW)


class TestDescribe:
    def test_active(self):
        info = describe(_art(is_public=True, until=NOW + timedelta(days=2, hours=3)), NOW)
        assert info["state"] == "public_active"
        assert info["days_left"] == 3
        assert info["days_left_label"] == "3일 남음"
        assert info["can_extend"] is False
        assert info["actions"] == ["delete", "unpublish"]

    def test_expired(self):
        info = describe(_art(is_public=True, until=NOW - timedelta(days=1)), NOW)
        assert info["state"] == "public_expired"
        assert info["days_left_label"] == "오늘 종료"
        assert info["can_extend"] is True

    def test_private_has_no_countdown(self):
        info = describe(_art(), NOW)
        assert info["days_left"] is None
        assert info["days_left_label"] == ""
        assert info["actions"] == ["delete", "publish"]
