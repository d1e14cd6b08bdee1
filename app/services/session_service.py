"""Session service - owns the single active session of this process."""
import asyncio
import logging
from typing import Callable, Optional

from app.models.session import ActiveSession, SessionStatus, SessionView
from app.models.work_log import WorkLog
from app.services import session_machine
from app.services.log_service import LogService
from app.services.sync_service import SessionPoller, SyncReconciler
from app.utils.duration import format_elapsed, now_ms


logger = logging.getLogger(__name__)


class SessionService:
    """
    Applies session transitions and persists the result after each one.

    Transitions run one at a time, so none of them can see a session that
    another request is still updating.
    """

    def __init__(
        self,
        reconciler: SyncReconciler,
        log_service: LogService,
        poll_interval: float,
        billing_unit: int = 30,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize service.

        Args:
            reconciler: Persistence and remote mirror
            log_service: Receives the log produced by clock-out
            poll_interval: Seconds between remote session polls
            billing_unit: Billing unit in minutes for timer entries
            clock: Source of the current instant (epoch ms)
        """
        self.reconciler = reconciler
        self.log_service = log_service
        self.billing_unit = billing_unit
        self.clock = clock
        self.session: Optional[ActiveSession] = None
        self._lock = asyncio.Lock()
        self.poller = SessionPoller(
            reconciler,
            get_session=lambda: self.session,
            adopt=self._adopt,
            interval=poll_interval,
            lock=self._lock,
        )

    async def load(self) -> Optional[ActiveSession]:
        """Load and reconcile the session; start polling if one is active."""
        self.session = await self.reconciler.load_session()
        if self.session is not None:
            self.poller.start()
        return self.session

    def view(self, now: Optional[int] = None) -> SessionView:
        """
        Current session with elapsed work and break time.

        While on break, work time is frozen at the break start.
        """
        session = self.session
        if session is None:
            return SessionView()

        now = self.clock() if now is None else now
        if session.status == SessionStatus.BREAK and session.break_start_time is not None:
            work_ms = session.break_start_time - session.start_time - session.accumulated_break_time
            break_ms = now - session.break_start_time
        else:
            work_ms = now - session.start_time - session.accumulated_break_time
            break_ms = 0

        work_ms, break_ms = max(work_ms, 0), max(break_ms, 0)
        return SessionView(
            session=session,
            work_ms=work_ms,
            current_break_ms=break_ms,
            work_elapsed=format_elapsed(work_ms),
            break_elapsed=format_elapsed(break_ms),
        )

    async def _commit(self, session: Optional[ActiveSession]) -> None:
        self.session = session
        await self.reconciler.save_session(session)

    async def clock_in(self, now: Optional[int] = None) -> ActiveSession:
        """
        Start a working session.

        Raises:
            InvalidTransition: If a session is already active
        """
        async with self._lock:
            session = session_machine.clock_in(self.session, self.clock() if now is None else now)
            await self._commit(session)
        self.poller.start()
        logger.info("Clocked in")
        return session

    async def start_break(self, now: Optional[int] = None) -> ActiveSession:
        """
        Start a break.

        Raises:
            InvalidTransition: If not currently working
        """
        async with self._lock:
            session = session_machine.start_break(self.session, self.clock() if now is None else now)
            await self._commit(session)
        return session

    async def end_break(self, now: Optional[int] = None) -> ActiveSession:
        """
        End the current break.

        Raises:
            InvalidTransition: If not currently on break
        """
        async with self._lock:
            session = session_machine.end_break(self.session, self.clock() if now is None else now)
            await self._commit(session)
        return session

    async def clock_out(
        self,
        hourly_rate: float,
        confirm_zero: bool = False,
        now: Optional[int] = None,
    ) -> WorkLog:
        """
        Finalize the session into a work log and clear it.

        Args:
            hourly_rate: Rate in effect
            confirm_zero: Save even if no billable minutes remain
            now: Clock-out instant (defaults to the clock)

        Returns:
            The appended work log

        Raises:
            InvalidTransition: If there is no active session
            ZeroDurationWarning: If nothing is billable and not confirmed
        """
        async with self._lock:
            log = session_machine.clock_out(
                self.session,
                self.clock() if now is None else now,
                hourly_rate,
                confirm_zero=confirm_zero,
                billing_unit=self.billing_unit,
            )
            self.session = None
            await self.log_service.add_log(log)
            await self._commit(None)
        await self.poller.stop()
        logger.info("Clocked out: %d billable minutes, pay %d", log.total_minutes, log.total_pay)
        return log

    async def _adopt(self, session: Optional[ActiveSession]) -> None:
        # Runs under the poller's hold of the transition lock.
        self.session = session
        await self.reconciler.cache_session(session)

    async def stop_polling(self) -> None:
        await self.poller.stop()
