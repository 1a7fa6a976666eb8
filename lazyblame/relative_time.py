"""Human-readable "N units ago" phrases for blame dates."""

from __future__ import annotations

from datetime import datetime, timezone

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR

# Coarsest first. A month is a flat 30 days and a year 365 days.
TIME_UNITS: tuple[tuple[str, int], ...] = (
    ("year", 365 * SECONDS_PER_DAY),
    ("month", 30 * SECONDS_PER_DAY),
    ("week", 7 * SECONDS_PER_DAY),
    ("day", SECONDS_PER_DAY),
    ("hour", SECONDS_PER_HOUR),
    ("minute", SECONDS_PER_MINUTE),
    ("second", 1),
)
JUST_NOW = "just now"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    A trailing ``Z`` means UTC; naive values are taken as UTC too.
    Raises ``ValueError`` for text that is not ISO-8601.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def format_elapsed(seconds: float) -> str:
    """Bucket an elapsed duration into the coarsest unit that is at least 1.

    The count is rounded half up in that unit, so 82 days reads as
    ``"3 months ago"``. A rounded count that reaches one whole coarser unit
    reads as that unit instead: 59.5 minutes is ``"1 hour ago"`` and 362 days
    ``"1 year ago"``. Durations under one second, negative ones included,
    read as ``"just now"``.
    """
    if seconds < 1:
        return JUST_NOW
    for index, (unit, size) in enumerate(TIME_UNITS):
        if seconds < size:
            continue
        count = int(seconds / size + 0.5)
        if index > 0:
            coarser_unit, coarser_size = TIME_UNITS[index - 1]
            if count >= round(coarser_size / size):
                unit, count = coarser_unit, 1
        plural = "" if count == 1 else "s"
        return f"{count} {unit}{plural} ago"
    return JUST_NOW


def format_relative_time(date: str, now: datetime) -> str:
    """Describe how long before ``now`` the ISO timestamp ``date`` was.

    An unparseable ``date`` is echoed back verbatim instead of raising.
    """
    try:
        then = parse_timestamp(date)
    except ValueError:
        return date
    return format_elapsed((_as_aware(now) - then).total_seconds())
