"""Preference service - locally stored hourly rate and remote binding."""
import logging
from typing import Optional

from app.models.preferences import Preferences
from app.stores.local_store import PANTRY_ID_KEY, RATE_KEY, LocalStore


logger = logging.getLogger(__name__)


class PreferenceService:
    """Service for reading and updating preferences."""

    def __init__(self, local: LocalStore, default_rate: float, default_pantry_id: Optional[str] = None):
        """
        Initialize service.

        Args:
            local: Local key-value cache
            default_rate: Rate used until the user sets one
            default_pantry_id: Remote binding used until the user sets one
        """
        self.local = local
        self.default_rate = default_rate
        self.default_pantry_id = default_pantry_id

    async def get_rate(self) -> float:
        """Current default hourly rate."""
        raw = await self.local.get(RATE_KEY)
        try:
            rate = float(raw)
        except (TypeError, ValueError):
            return self.default_rate
        return rate if rate >= 0 else self.default_rate

    async def set_rate(self, rate: float) -> float:
        """Update the default hourly rate."""
        await self.local.set(RATE_KEY, rate)
        return rate

    async def get_pantry_id(self) -> Optional[str]:
        """Current remote binding, if any."""
        raw = await self.local.get(PANTRY_ID_KEY)
        if raw is None:
            return self.default_pantry_id
        return raw or None

    async def set_pantry_id(self, pantry_id: Optional[str]) -> None:
        """
        Store the remote binding.

        An explicit disconnect is stored as an empty string so that the
        configured default binding does not come back on restart.
        """
        await self.local.set(PANTRY_ID_KEY, pantry_id or "")

    async def get(self) -> Preferences:
        """All preferences."""
        return Preferences(
            hourly_rate=await self.get_rate(),
            pantry_id=await self.get_pantry_id(),
        )
