"""Work log endpoints - history and manual entries."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.exceptions import LogNotFound
from app.models.work_log import WorkLog, WorkLogCreate
from app.tracker import Tracker, get_tracker


router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[WorkLog])
async def list_logs(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    tracker: Tracker = Depends(get_tracker),
):
    """
    List work logs.

    - Optional filters: year, month
    - Results sorted by date then start time, most recent first
    """
    return tracker.logs.list_logs(year=year, month=month)


@router.post("", response_model=WorkLog, status_code=status.HTTP_201_CREATED)
async def create_log(
    entry: WorkLogCreate,
    tracker: Tracker = Depends(get_tracker),
):
    """
    Create a manual work log.

    - Overnight shifts are supported (end before start)
    - A break window takes precedence over breakMinutes
    - Rate defaults to the configured hourly rate
    - No billing unit rounding; must leave more than 0 worked minutes
    """
    try:
        rate = await tracker.preferences.get_rate()
        return await tracker.logs.create_manual_entry(entry, default_rate=rate)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{log_id}", response_model=WorkLog)
async def get_log(
    log_id: str,
    tracker: Tracker = Depends(get_tracker),
):
    """Get a specific work log by ID."""
    try:
        return tracker.logs.get_log(log_id)
    except LogNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{log_id}")
async def delete_log(
    log_id: str,
    tracker: Tracker = Depends(get_tracker),
):
    """
    Delete a work log.

    - Hard delete (permanent)
    """
    try:
        return await tracker.logs.delete_log(log_id)
    except LogNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
