"""Settings endpoints - hourly rate and remote sync binding."""
from fastapi import APIRouter, Depends, HTTPException

from app.exceptions import RemoteUnavailable
from app.models.preferences import Preferences, RateUpdate, RemoteConnect
from app.tracker import Tracker, get_tracker


router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=Preferences)
async def get_settings(tracker: Tracker = Depends(get_tracker)):
    """Get the hourly rate and remote binding."""
    return await tracker.preferences.get()


@router.put("/rate", response_model=Preferences)
async def update_rate(
    rate_update: RateUpdate,
    tracker: Tracker = Depends(get_tracker),
):
    """Set the default hourly rate used by clock-out and manual entries."""
    await tracker.preferences.set_rate(rate_update.hourly_rate)
    return await tracker.preferences.get()


@router.post("/remote", response_model=Preferences)
async def connect_remote(
    remote_connect: RemoteConnect,
    tracker: Tracker = Depends(get_tracker),
):
    """
    Connect remote sync.

    - The pantry id is validated first
    - Remote data replaces local data once connected
    """
    try:
        return await tracker.connect_remote(remote_connect.pantry_id)
    except (ValueError, RemoteUnavailable) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/remote", response_model=Preferences)
async def disconnect_remote(tracker: Tracker = Depends(get_tracker)):
    """
    Disconnect remote sync.

    - Stops syncing and clears locally cached logs
    """
    return await tracker.disconnect_remote()
