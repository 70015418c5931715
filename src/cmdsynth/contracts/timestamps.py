"""UTC ISO-8601 timestamp helpers.

All timestamps produced by cmdsynth share one format: UTC, microsecond
precision, ``Z`` suffix (``2024-01-01T00:00:00.000000Z``). Within that format,
lexicographic order equals chronological order, which window validation
relies on.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

_ONE_TICK = timedelta(microseconds=1)


def format_timestamp(moment: datetime) -> str:
    """Render a datetime in the canonical timestamp format.

    Naive datetimes are assumed to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    # isoformat keeps four-digit years, strftime("%Y") does not on every platform
    return moment.astimezone(UTC).replace(tzinfo=None).isoformat(timespec="microseconds") + "Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Raises:
        ValueError: If value is not ISO-8601
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def utc_now() -> str:
    return format_timestamp(datetime.now(UTC))


def advance_timestamp(previous: str) -> str:
    """Return a timestamp strictly later than ``previous``.

    Uses the wall clock unless it has not moved past ``previous`` yet, in
    which case ``previous`` is bumped by one microsecond.
    """
    now = datetime.now(UTC)
    floor = parse_timestamp(previous) + _ONE_TICK
    return format_timestamp(max(now, floor))
