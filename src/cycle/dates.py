"""Local-calendar date helpers.

Every log is keyed by the user's *local* calendar day as ``YYYY-MM-DD``.
Converting through UTC would move a late-night entry onto the next day, so
``local_date_string`` always reads the local year/month/day.

Day arithmetic goes through noon of each day.  ``datetime.date`` math is
already immune to daylight-saving shifts, but pinning to noon keeps the
helpers correct when handed wall-clock ``datetime`` values as well.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

_NOON = time(12, 0)

DateLike = str | date


def local_date_string(moment: datetime | date | None = None) -> str:
    """Return ``YYYY-MM-DD`` for the local calendar day of ``moment``.

    Args:
        moment: Aware datetimes are converted to the local zone first; naive
                datetimes are taken as already local.  Defaults to now.
    """
    if moment is None:
        moment = datetime.now()
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone()  # local zone
        return moment.date().isoformat()
    return moment.isoformat()


def parse_date(value: DateLike) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def _at_noon(value: DateLike) -> datetime:
    return datetime.combine(parse_date(value), _NOON)


def day_diff(a: DateLike, b: DateLike) -> int:
    """Signed whole days from ``a`` to ``b`` (``b - a``)."""
    return round((_at_noon(b) - _at_noon(a)) / timedelta(days=1))


def add_days(value: DateLike, n: int) -> str:
    """Return the date string ``n`` days after ``value``."""
    return local_date_string(_at_noon(value) + timedelta(days=n))


def today_string(as_of: date | None = None) -> str:
    """Today's local date string, or ``as_of`` when pinned (tests, replays)."""
    return as_of.isoformat() if as_of is not None else local_date_string()
