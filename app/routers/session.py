"""Session endpoints - clock in, breaks and clock out."""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.exceptions import InvalidTransition, ZeroDurationWarning
from app.models.session import ActiveSession, SessionView
from app.models.work_log import WorkLog
from app.tracker import Tracker, get_tracker


router = APIRouter(prefix="/session", tags=["session"])


def _conflict(e: InvalidTransition) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=SessionView)
async def get_session(tracker: Tracker = Depends(get_tracker)):
    """
    Get the active session with elapsed work and break time.

    - The session is null when not clocked in
    """
    return tracker.sessions.view()


@router.post("/clock-in", response_model=ActiveSession)
async def clock_in(tracker: Tracker = Depends(get_tracker)):
    """
    Clock in.

    - Only one session can be active; a second clock-in is rejected (409)
    """
    try:
        return await tracker.sessions.clock_in()
    except InvalidTransition as e:
        raise _conflict(e)


@router.post("/break/start", response_model=ActiveSession)
async def start_break(tracker: Tracker = Depends(get_tracker)):
    """
    Start a break.

    - Must be working
    """
    try:
        return await tracker.sessions.start_break()
    except InvalidTransition as e:
        raise _conflict(e)


@router.post("/break/end", response_model=ActiveSession)
async def end_break(tracker: Tracker = Depends(get_tracker)):
    """
    End the current break.

    - Must be on break
    """
    try:
        return await tracker.sessions.end_break()
    except InvalidTransition as e:
        raise _conflict(e)


@router.post("/clock-out", response_model=WorkLog, status_code=status.HTTP_201_CREATED)
async def clock_out(
    confirm_zero: bool = Query(False, alias="confirmZero"),
    tracker: Tracker = Depends(get_tracker),
):
    """
    Clock out and save the work log.

    - Works from working or break; an open break is closed at clock-out
    - Worked time is rounded down to the billing unit
    - If nothing is billable, answers 409 unless confirmZero=true
    """
    try:
        rate = await tracker.preferences.get_rate()
        return await tracker.sessions.clock_out(rate, confirm_zero=confirm_zero)
    except ZeroDurationWarning as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(e),
                "rawWorkMinutes": e.raw_work_minutes,
                "billableMinutes": e.billable_minutes,
            },
        )
    except InvalidTransition as e:
        raise _conflict(e)
