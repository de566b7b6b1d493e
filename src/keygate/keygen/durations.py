"""Issuance durations and expiry computation."""

from datetime import datetime, timedelta
from enum import Enum

from keygate.common.exceptions import ValidationError


class KeyDuration(str, Enum):
    ONE_DAY = "1day"
    THREE_DAYS = "3days"
    ONE_MONTH = "1month"
    SIX_MONTHS = "6months"
    TWO_YEARS = "2years"
    FOREVER = "forever"


# Months and years are fixed day counts, not calendar arithmetic.
DURATION_OFFSETS: dict[KeyDuration, timedelta | None] = {
    KeyDuration.ONE_DAY: timedelta(days=1),
    KeyDuration.THREE_DAYS: timedelta(days=3),
    KeyDuration.ONE_MONTH: timedelta(days=30),
    KeyDuration.SIX_MONTHS: timedelta(days=180),
    KeyDuration.TWO_YEARS: timedelta(days=730),
    KeyDuration.FOREVER: None,
}


def parse_duration(value: str | KeyDuration) -> KeyDuration:
    """Coerce a raw duration name, raising ValidationError for unknown values."""
    if isinstance(value, KeyDuration):
        return value
    try:
        return KeyDuration((value or "").strip())
    except ValueError:
        allowed = ", ".join(d.value for d in KeyDuration)
        raise ValidationError(
            f"Unknown duration {value!r}; expected one of: {allowed}"
        ) from None


def compute_expiry(now: datetime, duration: str | KeyDuration) -> datetime | None:
    """Expiry for a key issued at ``now``; None means the key never expires."""
    offset = DURATION_OFFSETS[parse_duration(duration)]
    if offset is None:
        return None
    return now + offset
