"""Session state machine - pure clock-in/break/clock-out transitions.

Every transition takes the current session value (None when idle) and the
current instant in epoch milliseconds, and returns a new value. Inputs are
never mutated; a rejected transition raises InvalidTransition and the caller
keeps its previous value.
"""
import uuid
from typing import Optional

from app.exceptions import InvalidTransition, ZeroDurationWarning
from app.models.session import ActiveSession, SessionStatus
from app.models.work_log import WorkLog
from app.services.pay_calculator import compute_breakdown
from app.utils.duration import (
    MS_PER_MINUTE,
    round_to_billing_unit,
    to_clock_time,
    to_local_date,
)


TIMER_NOTE = "Clock-in record"


def _state_name(session: Optional[ActiveSession]) -> str:
    return "idle" if session is None else session.status.value


def clock_in(session: Optional[ActiveSession], now: int) -> ActiveSession:
    """
    Start a new working session.

    Raises:
        InvalidTransition: If a session is already active
    """
    if session is not None:
        raise InvalidTransition("clock in", _state_name(session))

    return ActiveSession(
        status=SessionStatus.WORKING,
        start_time=now,
        break_start_time=None,
        accumulated_break_time=0,
    )


def start_break(session: Optional[ActiveSession], now: int) -> ActiveSession:
    """
    Put a working session on break.

    Raises:
        InvalidTransition: If there is no session or it is already on break
    """
    if session is None or session.status != SessionStatus.WORKING:
        raise InvalidTransition("start break", _state_name(session))

    return session.model_copy(update={
        "status": SessionStatus.BREAK,
        "break_start_time": now,
    })


def _fold_break(session: ActiveSession, now: int) -> int:
    """Accumulated break time including any break still in progress at now."""
    accumulated = session.accumulated_break_time
    if session.status == SessionStatus.BREAK and session.break_start_time is not None:
        accumulated += max(now - session.break_start_time, 0)
    return accumulated


def end_break(session: Optional[ActiveSession], now: int) -> ActiveSession:
    """
    Resume work after a break.

    Raises:
        InvalidTransition: If the session is not on break
    """
    if session is None or session.status != SessionStatus.BREAK:
        raise InvalidTransition("end break", _state_name(session))

    return session.model_copy(update={
        "status": SessionStatus.WORKING,
        "break_start_time": None,
        "accumulated_break_time": _fold_break(session, now),
    })


def clock_out(
    session: Optional[ActiveSession],
    now: int,
    hourly_rate: float,
    confirm_zero: bool = False,
    billing_unit: int = 30,
) -> WorkLog:
    """
    Finalize the session into a work log.

    A break still in progress is closed at the clock-out instant. Worked
    time is rounded down to the billing unit before pay is computed.

    Args:
        session: Current session
        now: Clock-out instant (epoch ms)
        hourly_rate: Rate in effect
        confirm_zero: Commit even if no billable minutes remain
        billing_unit: Billing unit in minutes

    Returns:
        Finalized work log; the caller clears the session afterwards

    Raises:
        InvalidTransition: If there is no active session
        ZeroDurationWarning: If billable minutes are zero and not confirmed
    """
    if session is None:
        raise InvalidTransition("clock out", _state_name(session))

    accumulated_break = _fold_break(session, now)

    total_duration_ms = now - session.start_time
    work_duration_ms = total_duration_ms - accumulated_break

    raw_work_minutes = work_duration_ms // MS_PER_MINUTE
    break_minutes = accumulated_break // MS_PER_MINUTE
    actual_work_minutes = round_to_billing_unit(raw_work_minutes, billing_unit)

    if actual_work_minutes <= 0:
        if not confirm_zero:
            raise ZeroDurationWarning(raw_work_minutes, max(actual_work_minutes, 0))
        actual_work_minutes = 0

    breakdown = compute_breakdown(actual_work_minutes, hourly_rate)

    return WorkLog(
        id=uuid.uuid4().hex,
        date=to_local_date(session.start_time),
        start_time=to_clock_time(session.start_time),
        end_time=to_clock_time(now),
        break_minutes=break_minutes,
        hourly_rate=hourly_rate,
        total_minutes=actual_work_minutes,
        regular_minutes=breakdown.regular_minutes,
        overtime_level1_minutes=breakdown.overtime_level1_minutes,
        overtime_level2_minutes=breakdown.overtime_level2_minutes,
        total_pay=breakdown.total_pay,
        note=TIMER_NOTE,
    )
