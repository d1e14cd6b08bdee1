"""Duration and clock-time utilities."""
import time
from datetime import date, datetime
from typing import Optional


MINUTES_PER_DAY = 24 * 60
MS_PER_MINUTE = 60_000


def _parse_clock(value: str) -> int:
    """Convert an HH:MM string to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def duration_minutes(start: Optional[str], end: Optional[str]) -> int:
    """
    Calculate elapsed minutes between two HH:MM clock times.

    If end is before start the shift is assumed to cross midnight and a day is
    added before differencing, so the result is never negative.

    Args:
        start: Start clock time (HH:MM)
        end: End clock time (HH:MM)

    Returns:
        Elapsed minutes, or 0 if either time is missing

    Examples:
        >>> duration_minutes("09:00", "18:00")
        540
        >>> duration_minutes("22:00", "06:00")
        480
    """
    if not start or not end:
        return 0

    start_minutes = _parse_clock(start)
    end_minutes = _parse_clock(end)

    if end_minutes < start_minutes:
        end_minutes += MINUTES_PER_DAY

    return end_minutes - start_minutes


def round_to_billing_unit(raw_minutes: int, unit: int = 30) -> int:
    """
    Round raw minutes down to the nearest multiple of the billing unit.

    Always rounds down, never up. Only the timer path bills in units;
    manually entered durations are paid as entered.

    Args:
        raw_minutes: Raw elapsed minutes
        unit: Billing unit in minutes

    Returns:
        Billable minutes

    Raises:
        ValueError: If unit is not positive

    Examples:
        >>> round_to_billing_unit(59)
        30
        >>> round_to_billing_unit(29)
        0
    """
    if unit <= 0:
        raise ValueError("Billing unit must be positive")
    return (raw_minutes // unit) * unit


def now_ms() -> int:
    """Current instant as epoch milliseconds."""
    return int(time.time() * 1000)


def to_local_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to a naive local datetime."""
    return datetime.fromtimestamp(ms / 1000)


def to_local_date(ms: int) -> date:
    """Calendar date (local time) of an epoch-millisecond instant."""
    return to_local_datetime(ms).date()


def to_clock_time(ms: int) -> str:
    """HH:MM (local time) of an epoch-millisecond instant."""
    return to_local_datetime(ms).strftime("%H:%M")


def format_elapsed(ms: int) -> str:
    """Format milliseconds as HH:MM:SS."""
    total_seconds = max(ms, 0) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(minutes: int) -> str:
    """Format minutes as 'Xh Ym'."""
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m"
