"""Local key-value cache backed by a MongoDB collection."""
import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from app.models.session import ActiveSession
from app.models.work_log import WorkLog


logger = logging.getLogger(__name__)

LOGS_KEY = "work_logs"
SESSION_KEY = "active_session"
RATE_KEY = "hourly_rate"
PANTRY_ID_KEY = "pantry_id"

_work_logs_adapter = TypeAdapter(list[WorkLog])


class LocalStore:
    """Key-value store: one document per key, {_id: key, value: <json>}."""

    def __init__(self, db):
        """Initialize store with database connection."""
        self.db = db
        self.kv = db["kv_store"]

    async def get(self, key: str) -> Optional[Any]:
        """Get the raw JSON value for a key, or None."""
        doc = await self.kv.find_one({"_id": key})
        if not doc:
            return None
        return doc.get("value")

    async def set(self, key: str, value: Any) -> None:
        """Set the raw JSON value for a key."""
        await self.kv.update_one(
            {"_id": key},
            {"$set": {"value": value, "updated_at": datetime.utcnow()}},
            upsert=True,
        )

    async def delete(self, key: str) -> None:
        """Remove a key."""
        await self.kv.delete_one({"_id": key})

    async def load_logs(self) -> list[WorkLog]:
        """
        Load the cached work log collection.

        Returns:
            Cached logs, or an empty list if none are cached or the cached
            value is corrupt
        """
        raw = await self.get(LOGS_KEY)
        if raw is None:
            return []
        try:
            return _work_logs_adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt cached work logs: %s", e)
            return []

    async def save_logs(self, logs: list[WorkLog]) -> None:
        """Replace the cached work log collection."""
        await self.set(LOGS_KEY, [log.model_dump(mode="json", by_alias=True) for log in logs])

    async def load_session(self) -> Optional[ActiveSession]:
        """
        Load the cached active session.

        Returns:
            Cached session, or None if absent or corrupt
        """
        raw = await self.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            return ActiveSession.model_validate(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt cached session: %s", e)
            return None

    async def save_session(self, session: Optional[ActiveSession]) -> None:
        """Cache the active session, or remove it when None."""
        if session is None:
            await self.delete(SESSION_KEY)
        else:
            await self.set(SESSION_KEY, session.model_dump(mode="json", by_alias=True))
