"""Process-wide wiring of stores and services."""
import logging
from typing import Optional

import httpx

from app.config import settings
from app.exceptions import ValidationError
from app.models.preferences import Preferences
from app.services.log_service import LogService
from app.services.preference_service import PreferenceService
from app.services.session_service import SessionService
from app.services.sync_service import SyncReconciler
from app.stores.local_store import LocalStore
from app.stores.pantry import PantryClient


logger = logging.getLogger(__name__)


class Tracker:
    """Owns one instance of every service for the running process."""

    local: LocalStore | None = None
    http: httpx.AsyncClient | None = None
    reconciler: SyncReconciler | None = None
    preferences: PreferenceService | None = None
    logs: LogService | None = None
    sessions: SessionService | None = None

    @property
    def started(self) -> bool:
        return self.sessions is not None

    async def start(self, db, http: Optional[httpx.AsyncClient] = None) -> None:
        """
        Build services and reconcile state with the remote, if bound.

        Args:
            db: Database holding the local key-value cache
            http: HTTP client for the remote (created if omitted)
        """
        self.local = LocalStore(db)
        self.http = http or httpx.AsyncClient(timeout=settings.remote_timeout_seconds)
        self.preferences = PreferenceService(
            self.local,
            default_rate=settings.default_hourly_rate,
            default_pantry_id=settings.pantry_id,
        )
        self.reconciler = SyncReconciler(self.local)
        self.logs = LogService(self.reconciler)
        self.sessions = SessionService(
            self.reconciler,
            self.logs,
            poll_interval=settings.poll_interval_seconds,
            billing_unit=settings.billing_unit_minutes,
        )

        pantry_id = await self.preferences.get_pantry_id()
        if pantry_id:
            self.reconciler.bind(self._pantry(pantry_id))
            logger.info("Remote sync enabled")
        else:
            logger.info("Running in local-only mode")

        await self.logs.load()
        await self.sessions.load()

    async def stop(self) -> None:
        """Stop polling, flush remote writes and close the HTTP client."""
        if self.sessions:
            await self.sessions.stop_polling()
        if self.reconciler:
            await self.reconciler.wait_pending()
        if self.http:
            await self.http.aclose()
        self.sessions = None

    def _pantry(self, pantry_id: str) -> PantryClient:
        return PantryClient(pantry_id, self.http, settings.pantry_base_url)

    async def connect_remote(self, pantry_id: str) -> Preferences:
        """
        Bind a remote pantry and reconcile with it.

        Raises:
            ValidationError: If the pantry does not exist
            RemoteUnavailable: If the pantry could not be reached
        """
        client = self._pantry(pantry_id.strip())
        if not await client.validate():
            raise ValidationError("Invalid pantry id")

        await self.sessions.stop_polling()
        await self.preferences.set_pantry_id(client.pantry_id)
        self.reconciler.bind(client)
        await self.logs.load()
        await self.sessions.load()
        logger.info("Remote sync connected")
        return await self.preferences.get()

    async def disconnect_remote(self) -> Preferences:
        """Unbind the remote and forget the locally cached logs."""
        await self.sessions.stop_polling()
        self.reconciler.bind(None)
        await self.preferences.set_pantry_id(None)
        await self.logs.clear_local()
        logger.info("Remote sync disconnected; now local-only")
        return await self.preferences.get()


# Global tracker instance
tracker = Tracker()


def get_tracker() -> Tracker:
    """Dependency to get the started tracker."""
    if not tracker.started:
        raise RuntimeError("Tracker not started")
    return tracker
