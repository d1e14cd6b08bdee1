"""Tests for SessionService."""
import asyncio

import pytest
from datetime import datetime

PANTRY_ID = "pantry-123"
MINUTE_MS = 60_000

def _at(hour: int, minute: int = 0) -> int:
    return int(datetime(2026, 7, 14, hour, minute).timestamp() * 1000)

class FakeClock:
    """Settable clock returning epoch milliseconds."""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

def _service(fake_db, clock, pantry=None):
    from app.services.log_service import LogService
    from app.services.session_service import SessionService
    from app.services.sync_service import SyncReconciler
    from app.stores.local_store import LocalStore
    from app.stores.pantry import PantryClient

    remote = None
    if pantry is not None:
        remote = PantryClient(PANTRY_ID, pantry.client(), "https://getpantry.cloud/apiv1/pantry")
    reconciler = SyncReconciler(LocalStore(fake_db), remote)
    return SessionService(reconciler, LogService(reconciler), poll_interval=60, clock=clock)

@pytest.mark.asyncio
class TestSessionLifecycle:
    """Tests for the clock-in to clock-out flow."""

    async def test_full_flow(self, fake_db):
        """Test a full day persists the session and appends one log."""
        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)

        await service.clock_in()
        assert (await service.reconciler.local.load_session()).start_time == _at(9)

        clock.now = _at(12)
        await service.start_break()
        clock.now = _at(13)
        await service.end_break()
        clock.now = _at(18)
        log = await service.clock_out(hourly_rate=100)

        assert log.total_minutes == 480
        assert log.break_minutes == 60
        assert service.session is None
        assert await service.reconciler.local.load_session() is None
        assert service.log_service.list_logs() == [log]

    async def test_clock_in_twice_keeps_session(self, fake_db):
        """Test a rejected clock-in leaves the session unchanged."""
        from app.exceptions import InvalidTransition

        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)
        first = await service.clock_in()

        clock.now = _at(10)
        with pytest.raises(InvalidTransition):
            await service.clock_in()

        assert service.session == first

    async def test_zero_duration_keeps_session(self, fake_db):
        """Test an unconfirmed zero-duration clock-out changes nothing."""
        from app.exceptions import ZeroDurationWarning

        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)
        await service.clock_in()

        clock.now = _at(9, 10)
        with pytest.raises(ZeroDurationWarning):
            await service.clock_out(hourly_rate=100)

        assert service.session is not None
        assert service.log_service.list_logs() == []

        log = await service.clock_out(hourly_rate=100, confirm_zero=True)
        assert log.total_pay == 0
        assert service.session is None

    async def test_load_restores_local_session(self, fake_db):
        """Test a cached session is restored on load."""
        clock = FakeClock(_at(9))
        first = _service(fake_db, clock)
        session = await first.clock_in()

        second = _service(fake_db, clock)

        assert await second.load() == session

    async def test_concurrent_clock_outs_emit_one_log(self, fake_db):
        """Test overlapping clock-outs finalize the session exactly once."""
        from app.exceptions import InvalidTransition
        from app.models.work_log import WorkLog

        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)
        await service.clock_in()
        clock.now = _at(18)

        results = await asyncio.gather(
            service.clock_out(hourly_rate=100),
            service.clock_out(hourly_rate=100),
            return_exceptions=True,
        )

        logs = [result for result in results if isinstance(result, WorkLog)]
        errors = [result for result in results if isinstance(result, InvalidTransition)]
        assert len(logs) == 1
        assert len(errors) == 1
        assert service.log_service.list_logs() == logs
        assert service.session is None

    async def test_concurrent_breaks_apply_once(self, fake_db):
        """Test overlapping break starts leave one consistent session."""
        from app.exceptions import InvalidTransition

        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)
        await service.clock_in()
        clock.now = _at(12)

        results = await asyncio.gather(
            service.start_break(), service.start_break(), return_exceptions=True,
        )

        assert sum(isinstance(result, InvalidTransition) for result in results) == 1
        assert await service.reconciler.local.load_session() == service.session


@pytest.mark.asyncio
class TestSessionView:
    """Tests for elapsed time reporting."""

    async def test_idle(self, fake_db):
        service = _service(fake_db, FakeClock(_at(9)))

        view = service.view()

        assert view.session is None
        assert view.work_ms == 0

    async def test_working(self, fake_db):
        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)
        await service.clock_in()

        view = service.view(now=_at(10, 30))

        assert view.work_ms == 90 * MINUTE_MS
        assert view.work_elapsed == "01:30:00"
        assert view.current_break_ms == 0

    async def test_on_break_freezes_work_time(self, fake_db):
        clock = FakeClock(_at(9))
        service = _service(fake_db, clock)
        await service.clock_in()
        clock.now = _at(11)
        await service.start_break()

        view = service.view(now=_at(11, 20))

        assert view.work_ms == 120 * MINUTE_MS
        assert view.current_break_ms == 20 * MINUTE_MS
        assert view.break_elapsed == "00:20:00"

@pytest.mark.asyncio
class TestSessionSync:
    """Tests for remote mirroring and polling around transitions."""

    async def test_clock_in_mirrors_and_polls(self, fake_db, pantry):
        clock = FakeClock(_at(9))
        service = _service(fake_db, clock, pantry)

        await service.clock_in()
        await service.reconciler.wait_pending()

        assert pantry.baskets["session"]["startTime"] == _at(9)
        assert service.poller.running is True

        clock.now = _at(17)
        await service.clock_out(hourly_rate=100)
        await service.reconciler.wait_pending()

        assert service.poller.running is False
        assert pantry.baskets["session"]["startTime"] == 0
        assert pantry.baskets["worklogs"]["logs"][0]["totalMinutes"] == 480

    async def test_load_adopts_remote_session(self, fake_db, pantry):
        from app.models.session import ActiveSession

        remote = ActiveSession(
            status="working", start_time=_at(8), accumulated_break_time=0,
        )
        pantry.baskets["session"] = remote.model_dump(mode="json", by_alias=True)
        service = _service(fake_db, FakeClock(_at(9)), pantry)

        assert await service.load() == remote
        assert service.poller.running is True

        await service.stop_polling()

    async def test_adopt_from_poll_does_not_echo(self, fake_db, pantry):
        from app.models.session import ActiveSession

        service = _service(fake_db, FakeClock(_at(9)), pantry)
        remote = ActiveSession(
            status="break", start_time=_at(8), break_start_time=_at(8, 30),
            accumulated_break_time=0,
        )
        pantry.baskets["session"] = remote.model_dump(mode="json", by_alias=True)
        pantry.requests.clear()

        assert await service.poller.poll_once() is True

        assert service.session == remote
        assert await service.reconciler.local.load_session() == remote
        assert all(request.method == "GET" for request in pantry.requests)

    async def test_ended_break_survives_slow_break_push(self, fake_db, pantry):
        """Test a lagging break write cannot bring the break back via polling."""
        from app.models.session import SessionStatus

        clock = FakeClock(_at(9))
        service = _service(fake_db, clock, pantry)
        await service.clock_in()
        await service.reconciler.wait_pending()

        pantry.post_delays = [0.05]
        clock.now = _at(12)
        await service.start_break()
        await asyncio.sleep(0.01)
        clock.now = _at(12, 30)
        await service.end_break()
        await service.reconciler.wait_pending()

        assert await service.poller.poll_once() is True

        assert service.session.status == SessionStatus.WORKING
        assert service.session.accumulated_break_time == 30 * MINUTE_MS
        assert pantry.baskets["session"]["status"] == "working"

        await service.stop_polling()
