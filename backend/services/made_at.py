"""Parsing of the user-entered "made at" field (``YYYY-MM-DD HH:00``).

Only whole hours are accepted, and ``24:00`` is allowed as the end of the
given day (midnight of the next one). Month, day, minute and hour are
checked in that order, each with its own message. Day numbers are only
range-checked: a day past the end of its month rolls into the next month
(02-31 becomes 03-02 in a leap year).
"""

import re
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from backend.config import settings

MADE_AT_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2})$")

ERR_PATTERN = "형식은 YYYY-MM-DD 24:00 입니다."
ERR_MONTH = "월(mm)이 올바르지 않습니다."
ERR_DAY = "일(dd)이 올바르지 않습니다."
ERR_MINUTE = "분은 00만 허용합니다. (예: 24:00)"
ERR_HOUR = "시간은 00~24만 허용합니다."
ERR_DATE = "날짜가 올바르지 않습니다."


class MadeAtError(ValueError):
    """The "made at" input was rejected; the message is shown to the user."""


def parse_made_at(text: str) -> datetime:
    """Parse ``text`` into a naive local datetime, or raise MadeAtError."""
    m = MADE_AT_PATTERN.match((text or "").strip())
    if not m:
        raise MadeAtError(ERR_PATTERN)

    year, month, day, hour, minute = (int(g) for g in m.groups())

    if not 1 <= month <= 12:
        raise MadeAtError(ERR_MONTH)
    if not 1 <= day <= 31:
        raise MadeAtError(ERR_DAY)
    if minute != 0:
        raise MadeAtError(ERR_MINUTE)
    if not (hour == 24 or 0 <= hour <= 23):
        raise MadeAtError(ERR_HOUR)

    # Only year 0000 or a rollover past 9999-12-31 can fail here
    try:
        base = datetime(year, month, 1) + timedelta(days=day - 1)
        if hour == 24:
            return base + timedelta(days=1)
    except (ValueError, OverflowError):
        raise MadeAtError(ERR_DATE)
    return base.replace(hour=hour)


def validation_error(text: str) -> str | None:
    """The rejection message for ``text``, or None when it is valid."""
    try:
        parse_made_at(text)
    except MadeAtError as e:
        return str(e)
    return None


def default_made_at_input(today: date | None = None) -> str:
    """Prefill for the input field: the end of today."""
    today = today or datetime.now(local_zone()).date()
    return f"{today:%Y-%m-%d} 24:00"


def local_zone() -> tzinfo:
    return ZoneInfo(settings.timezone)


def resolve_made_at(
    use_now: bool,
    text: str | None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> datetime:
    """The aware timestamp to store as ``artwork_made_at``.

    ``use_now`` skips validation entirely and stamps the current instant.
    """
    tz = tz or local_zone()
    if use_now:
        return now or datetime.now(tz)
    return parse_made_at(text or "").replace(tzinfo=tz)
