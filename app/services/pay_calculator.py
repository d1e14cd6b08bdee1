"""Pay calculator - tiered overtime pay breakdown."""
from app.models.work_log import PayBreakdown


REGULAR_LIMIT_MINUTES = 480  # first 8 hours
OVERTIME_LEVEL1_LIMIT_MINUTES = 120  # next 2 hours

REGULAR_MULTIPLIER = 1.0
OVERTIME_LEVEL1_MULTIPLIER = 1.34
OVERTIME_LEVEL2_MULTIPLIER = 1.67


def compute_breakdown(total_minutes: int, hourly_rate: float) -> PayBreakdown:
    """
    Split worked minutes into overtime tiers and compute the pay.

    Lower tiers fill first: up to 8 hours regular, the next 2 hours at
    1.34x, anything beyond 10 hours at 1.67x. The pay is rounded once, on
    the summed total, never per tier.

    Args:
        total_minutes: Worked minutes (breaks already excluded)
        hourly_rate: Hourly rate in effect

    Returns:
        Pay breakdown

    Raises:
        ValueError: If minutes or rate are negative
    """
    if total_minutes < 0:
        raise ValueError("Worked minutes cannot be negative")
    if hourly_rate < 0:
        raise ValueError("Hourly rate cannot be negative")

    remaining = total_minutes

    regular_minutes = min(remaining, REGULAR_LIMIT_MINUTES)
    remaining -= regular_minutes

    overtime_level1_minutes = min(remaining, OVERTIME_LEVEL1_LIMIT_MINUTES)
    remaining -= overtime_level1_minutes

    overtime_level2_minutes = remaining

    pay = (
        (regular_minutes / 60) * hourly_rate * REGULAR_MULTIPLIER
        + (overtime_level1_minutes / 60) * hourly_rate * OVERTIME_LEVEL1_MULTIPLIER
        + (overtime_level2_minutes / 60) * hourly_rate * OVERTIME_LEVEL2_MULTIPLIER
    )

    return PayBreakdown(
        regular_minutes=regular_minutes,
        overtime_level1_minutes=overtime_level1_minutes,
        overtime_level2_minutes=overtime_level2_minutes,
        total_pay=round(pay),
    )
