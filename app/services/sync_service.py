"""Sync service - reconciles the local cache with the remote replica.

The same policy applies to the active session and to the work log
collection: the local store is written first and always, the remote is
mirrored in the background on a best-effort basis, and on load the remote
wins whenever a remote binding exists and answers.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from app.exceptions import RemoteUnavailable
from app.models.session import ActiveSession
from app.models.work_log import WorkLog
from app.stores.local_store import LocalStore
from app.stores.pantry import LOGS_BASKET, SESSION_BASKET, PantryClient


logger = logging.getLogger(__name__)

# Pantry baskets cannot be deleted reliably, so a cleared session is written
# as a marker that fails session validation.
CLEARED_SESSION = {"startTime": 0, "status": "idle"}

_work_logs_adapter = TypeAdapter(list[WorkLog])


def parse_remote_session(payload: Any) -> Optional[ActiveSession]:
    """
    Validate a remote session payload.

    Returns:
        The session, or None if the payload is missing, the cleared marker,
        or lacks any required field
    """
    if not isinstance(payload, dict):
        return None
    try:
        return ActiveSession.model_validate(payload)
    except ValidationError:
        return None


def parse_remote_logs(payload: Any) -> Optional[list[WorkLog]]:
    """
    Validate a remote work log payload ({"logs": [...]}).

    A single invalid entry invalidates the whole payload.

    Returns:
        The logs (possibly empty), or None if the payload is missing or malformed
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("logs"), list):
        return None
    try:
        return _work_logs_adapter.validate_python(payload["logs"])
    except ValidationError as e:
        logger.warning("Ignoring malformed remote work logs: %s", e)
        return None


def should_adopt_remote(
    local: Optional[ActiveSession],
    remote: ActiveSession,
) -> bool:
    """Adopt a polled remote session only if it differs in status or break time."""
    if local is None:
        return True
    return (
        local.status != remote.status
        or local.accumulated_break_time != remote.accumulated_break_time
    )


class SyncReconciler:
    """
    Local-first persistence with an optional remote mirror.

    Remote writes go through one worker per basket. A save made while a push
    for the same basket is in flight replaces any queued payload, so the
    remote always ends on the newest local value.
    """

    def __init__(self, local: LocalStore, remote: Optional[PantryClient] = None):
        """
        Initialize reconciler.

        Args:
            local: Local key-value cache
            remote: Remote replica, or None for local-only operation
        """
        self.local = local
        self.remote = remote
        self._queued: dict[str, Any] = {}
        self._failed: dict[str, Any] = {}
        self._workers: dict[str, asyncio.Task] = {}
        self.session_writes = 0

    def bind(self, remote: Optional[PantryClient]) -> None:
        """Attach or detach the remote replica."""
        self.remote = remote
        self._queued.clear()
        self._failed.clear()

    async def load_session(self) -> Optional[ActiveSession]:
        """
        Load the active session, preferring the remote copy.

        Returns:
            Reconciled session, or None
        """
        if self.remote is None:
            return await self.local.load_session()

        try:
            payload = await self.remote.fetch(SESSION_BASKET)
        except RemoteUnavailable as e:
            logger.warning("Remote session unavailable, using local cache: %s", e)
            return await self.local.load_session()

        session = parse_remote_session(payload)
        if session is None:
            logger.info("Remote holds no session; clearing local session")
        await self.local.save_session(session)
        return session

    async def load_logs(self) -> list[WorkLog]:
        """
        Load the work log collection, preferring the remote copy.

        An explicitly empty remote collection clears the local one. A remote
        that has never been written (or holds garbage) is seeded from local.

        Returns:
            Reconciled logs, unsorted
        """
        if self.remote is None:
            return await self.local.load_logs()

        try:
            payload = await self.remote.fetch(LOGS_BASKET)
        except RemoteUnavailable as e:
            logger.warning("Remote logs unavailable, using local cache: %s", e)
            return await self.local.load_logs()

        remote_logs = parse_remote_logs(payload)
        if remote_logs is None:
            local_logs = await self.local.load_logs()
            if local_logs:
                logger.info("Seeding remote with %d local work logs", len(local_logs))
                self._schedule_push(LOGS_BASKET, self._logs_payload(local_logs))
            return local_logs

        await self.local.save_logs(remote_logs)
        return remote_logs

    async def save_session(self, session: Optional[ActiveSession]) -> None:
        """Persist the session locally, then mirror it to the remote."""
        self.session_writes += 1
        await self.local.save_session(session)
        if session is None:
            payload = dict(CLEARED_SESSION)
        else:
            payload = session.model_dump(mode="json", by_alias=True)
        self._schedule_push(SESSION_BASKET, payload)

    async def cache_session(self, session: Optional[ActiveSession]) -> None:
        """Persist a session adopted from the remote; no echo back."""
        await self.local.save_session(session)

    async def save_logs(self, logs: list[WorkLog]) -> None:
        """Persist the full collection locally, then mirror it to the remote."""
        await self.local.save_logs(logs)
        self._schedule_push(LOGS_BASKET, self._logs_payload(logs))

    async def wait_pending(self) -> None:
        """Wait for outstanding remote writes."""
        while self._workers:
            await asyncio.gather(*list(self._workers.values()))

    def is_unsynced(self, basket: str) -> bool:
        """True while the remote may hold an older value than the local cache."""
        return basket in self._queued or basket in self._workers or basket in self._failed

    def retry_failed(self, basket: str) -> bool:
        """
        Re-push the last payload that failed to reach the remote.

        Returns:
            True if a retry was scheduled
        """
        if basket not in self._failed or basket in self._workers:
            return False
        self._schedule_push(basket, self._failed.pop(basket))
        return True

    def _logs_payload(self, logs: list[WorkLog]) -> dict:
        return {"logs": [log.model_dump(mode="json", by_alias=True) for log in logs]}

    def _schedule_push(self, basket: str, payload: Any) -> None:
        if self.remote is None:
            return
        self._queued[basket] = payload
        self._failed.pop(basket, None)
        if basket not in self._workers:
            self._workers[basket] = asyncio.create_task(self._drain(basket))

    async def _drain(self, basket: str) -> None:
        try:
            while basket in self._queued:
                payload = self._queued.pop(basket)
                remote = self.remote
                if remote is None:
                    break
                try:
                    await remote.push(basket, payload)
                except RemoteUnavailable as e:
                    logger.warning("Remote write to %r failed; local copy kept: %s", basket, e)
                    if basket not in self._queued:
                        self._failed[basket] = payload
        finally:
            self._workers.pop(basket, None)


class SessionPoller:
    """
    Periodically re-fetches the remote session while a session is active.

    The loop ends on its own once the remote reports no session, and can be
    cancelled with stop().
    """

    def __init__(
        self,
        reconciler: SyncReconciler,
        get_session: Callable[[], Optional[ActiveSession]],
        adopt: Callable[[Optional[ActiveSession]], Awaitable[None]],
        interval: float,
        lock: Optional[asyncio.Lock] = None,
    ):
        """
        Initialize poller.

        Args:
            reconciler: Reconciler holding the remote binding
            get_session: Returns the current local session
            adopt: Replaces the local session with a remote value
            interval: Seconds between polls
            lock: Lock held by local session transitions; adoption takes it too
        """
        self.reconciler = reconciler
        self.get_session = get_session
        self.adopt = adopt
        self.interval = interval
        self.lock = lock or asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> bool:
        """
        Run one poll.

        The remote value is not adopted if the local session was written
        since the fetch began, or while a local write has not reached the
        remote yet. A write that failed is retried instead.

        Returns:
            False once polling should stop
        """
        remote = self.reconciler.remote
        if remote is None:
            return False

        writes = self.reconciler.session_writes
        try:
            payload = await remote.fetch(SESSION_BASKET)
        except RemoteUnavailable as e:
            logger.warning("Session poll failed, retrying next tick: %s", e)
            return True

        async with self.lock:
            if self.reconciler.session_writes != writes:
                return True
            if self.reconciler.is_unsynced(SESSION_BASKET):
                if self.reconciler.retry_failed(SESSION_BASKET):
                    logger.warning("Remote session is behind the local one; retrying write")
                return True

            remote_session = parse_remote_session(payload)
            if remote_session is None:
                if self.get_session() is not None:
                    logger.info("Session ended remotely")
                await self.adopt(None)
                return False

            if should_adopt_remote(self.get_session(), remote_session):
                logger.info("Adopting remote session (%s)", remote_session.status.value)
                await self.adopt(remote_session)
            return True

    async def run(self) -> None:
        """Poll until the session ends."""
        while True:
            await asyncio.sleep(self.interval)
            if not await self.poll_once():
                break

    def start(self) -> None:
        """Start polling if not already running."""
        if self.running or self.reconciler.remote is None:
            return
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Cancel the polling task."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
