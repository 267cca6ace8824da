"""Calendar day windows in the bot's working timezone."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


def day_window(day: date, tz: ZoneInfo) -> tuple[int, int]:
    """Epoch-second bounds of ``day`` from 00:00:00 through 23:59:59 local time.

    Examples:
        >>> day_window(date(2024, 1, 15), ZoneInfo("America/New_York"))
        (1705294800, 1705381199)
    """
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=tz)
    return int(start.timestamp()), int(end.timestamp())


def recap_day(now: datetime, tz: ZoneInfo, yesterday: bool = False) -> date:
    """Local calendar day a recap covers: today, or the day before."""
    local_day = now.astimezone(tz).date()
    if yesterday:
        return local_day - timedelta(days=1)
    return local_day


def next_snapshot_time(now: datetime, tz: ZoneInfo) -> datetime:
    """First day boundary strictly after ``now``.

    Snapshots are taken at both ends of every local day, so each day window
    opens and closes on a snapshot.

    Examples:
        >>> next_snapshot_time(datetime(2024, 1, 15, 19, tzinfo=ZoneInfo("UTC")),
        ...                    ZoneInfo("America/New_York")).isoformat()
        '2024-01-15T23:59:59-05:00'
    """
    today = now.astimezone(tz).date()
    start, end = day_window(today, tz)
    tomorrow_start, _ = day_window(today + timedelta(days=1), tz)
    current = now.timestamp()
    run_at = next(bound for bound in (start, end, tomorrow_start) if bound > current)
    return datetime.fromtimestamp(run_at, tz)
