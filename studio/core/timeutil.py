"""Clock and ISO-8601 helpers.

Timestamps are persisted as ISO-8601 strings in UTC with a fixed layout
(microsecond precision, ``+00:00`` offset) so that string comparison in SQL
orders them correctly.
"""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo


class Clock:
    """Source of the current time, injected so tests can pin it."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def to_iso(moment: datetime) -> str:
    """Render an aware datetime as a sortable UTC ISO string."""
    if moment.tzinfo is None:
        raise ValueError("naive datetimes are not accepted")
    return moment.astimezone(UTC).isoformat(timespec="microseconds")


def utc_now_iso() -> str:
    return to_iso(datetime.now(UTC))


def combine_local(day: str, wall_time: str, timezone: str) -> datetime:
    """Combine a session's calendar date and wall-clock time.

    ``day`` is ``YYYY-MM-DD`` and ``wall_time`` is ``HH:MM`` in the studio's
    timezone. Returns the aware instant in UTC.
    """
    hours, minutes = wall_time.split(":")
    local = datetime.combine(
        date.fromisoformat(day),
        time(int(hours), int(minutes)),
        tzinfo=ZoneInfo(timezone),
    )
    return local.astimezone(UTC)
