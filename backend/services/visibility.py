"""Artwork visibility/expiry state machine.

The state is never stored: it is derived from ``is_public`` and
``public_until`` every time an artwork is read.

    private --publish--> public_active --(time)--> public_expired
    public_active --unpublish--> private
    public_expired --extend--> public_active
    public_expired --unpublish--> private
"""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum

from backend.config import settings


class ArtworkState(str, Enum):
    PRIVATE = "private"
    PUBLIC_ACTIVE = "public_active"
    PUBLIC_EXPIRED = "public_expired"


class ArtworkAction(str, Enum):
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    EXTEND = "extend"
    DELETE = "delete"


class InvalidTransition(Exception):
    """The requested action is not offered for the artwork's current state."""

    def __init__(self, action: ArtworkAction, state: ArtworkState):
        super().__init__(f"Cannot {action.value} an artwork in state {state.value}")
        self.action = action
        self.state = state


_ACTIONS: dict[ArtworkState, frozenset[ArtworkAction]] = {
    ArtworkState.PRIVATE: frozenset({ArtworkAction.PUBLISH, ArtworkAction.DELETE}),
    ArtworkState.PUBLIC_ACTIVE: frozenset({ArtworkAction.UNPUBLISH, ArtworkAction.DELETE}),
    ArtworkState.PUBLIC_EXPIRED: frozenset(
        {ArtworkAction.EXTEND, ArtworkAction.UNPUBLISH, ArtworkAction.DELETE}
    ),
}

ONE_DAY = timedelta(days=1)
ENDS_TODAY_LABEL = "오늘 종료"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: "str | datetime | None") -> datetime | None:
    """Parse an ISO-8601 timestamp from the backend into an aware datetime.

    Naive values are taken as UTC. Returns None for missing or garbled input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat()


def compute_state(artwork: dict, now: datetime | None = None) -> ArtworkState:
    """Derive the visibility state of an artwork row."""
    if not artwork.get("is_public"):
        return ArtworkState.PRIVATE
    until = parse_timestamp(artwork.get("public_until"))
    if until is None:
        return ArtworkState.PUBLIC_ACTIVE
    if until <= (now or utcnow()):
        return ArtworkState.PUBLIC_EXPIRED
    return ArtworkState.PUBLIC_ACTIVE


def is_expired(artwork: dict, now: datetime | None = None) -> bool:
    return compute_state(artwork, now) is ArtworkState.PUBLIC_EXPIRED


def days_left(public_until: "str | datetime | None", now: datetime | None = None) -> int | None:
    """Whole days remaining in the public window, rounded up."""
    until = parse_timestamp(public_until)
    if until is None:
        return None
    return math.ceil((until - (now or utcnow())) / ONE_DAY)


def days_left_label(days: int | None) -> str:
    if days is None:
        return ""
    if days <= 0:
        return ENDS_TODAY_LABEL
    return f"{days}일 남음"


def available_actions(state: ArtworkState) -> frozenset[ArtworkAction]:
    return _ACTIONS[state]


def can_extend(artwork: dict, now: datetime | None = None) -> bool:
    return ArtworkAction.EXTEND in available_actions(compute_state(artwork, now))


def public_window_end(now: datetime | None = None) -> datetime:
    return (now or utcnow()) + timedelta(days=settings.public_window_days)


def publish_patch(now: datetime | None = None) -> dict:
    return {"is_public": True, "public_until": to_iso(public_window_end(now))}


def unpublish_patch() -> dict:
    return {"is_public": False, "public_until": None}


def extend_patch(now: datetime | None = None) -> dict:
    return {"public_until": to_iso(public_window_end(now))}


def plan_transition(
    artwork: dict, action: ArtworkAction, now: datetime | None = None
) -> dict:
    """Validate ``action`` against the current state and return the update patch.

    Raises InvalidTransition when the action is not offered. DELETE has no
    patch and is rejected here; it is handled by the caller.
    """
    state = compute_state(artwork, now)
    if action not in available_actions(state) or action is ArtworkAction.DELETE:
        raise InvalidTransition(action, state)

    if action is ArtworkAction.PUBLISH:
        return publish_patch(now)
    if action is ArtworkAction.UNPUBLISH:
        return unpublish_patch()
    return extend_patch(now)


def describe(artwork: dict, now: datetime | None = None) -> dict:
    """State, countdown and offered actions for one artwork, as plain values."""
    now = now or utcnow()
    state = compute_state(artwork, now)
    left = days_left(artwork.get("public_until"), now) if artwork.get("is_public") else None
    return {
        "state": state.value,
        "days_left": left,
        "days_left_label": days_left_label(left),
        "can_extend": ArtworkAction.EXTEND in available_actions(state),
        "actions": sorted(a.value for a in available_actions(state)),
    }
