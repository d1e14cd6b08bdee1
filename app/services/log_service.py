"""Log service - business logic for the work log collection."""
import logging
import uuid
from typing import Optional

from app.exceptions import LogNotFound, ValidationError
from app.models.work_log import WorkLog, WorkLogCreate
from app.services.pay_calculator import compute_breakdown
from app.services.sync_service import SyncReconciler
from app.utils.duration import duration_minutes


logger = logging.getLogger(__name__)


def sort_logs(logs: list[WorkLog]) -> list[WorkLog]:
    """Sort logs by date, then start time, most recent first."""
    return sorted(logs, key=lambda log: (log.date, log.start_time), reverse=True)


def build_manual_log(entry: WorkLogCreate, default_rate: float) -> WorkLog:
    """
    Build a work log from a manual entry.

    Manual entries are paid for the exact minutes entered; no billing unit
    rounding applies. A break window, when fully given, takes precedence
    over a break minute count.

    Args:
        entry: Manual entry data
        default_rate: Rate used when the entry carries none

    Returns:
        Finalized work log

    Raises:
        ValidationError: If the entry leaves no worked minutes
    """
    if entry.break_start_time and entry.break_end_time:
        break_minutes = duration_minutes(entry.break_start_time, entry.break_end_time)
    else:
        break_minutes = entry.break_minutes or 0

    actual_work_minutes = max(0, duration_minutes(entry.start_time, entry.end_time) - break_minutes)
    if actual_work_minutes <= 0:
        raise ValidationError("Worked time must be greater than 0; check the end time or break")

    hourly_rate = entry.hourly_rate if entry.hourly_rate is not None else default_rate
    breakdown = compute_breakdown(actual_work_minutes, hourly_rate)

    return WorkLog(
        id=uuid.uuid4().hex,
        date=entry.date,
        start_time=entry.start_time,
        end_time=entry.end_time,
        break_minutes=break_minutes,
        break_start_time=entry.break_start_time or None,
        break_end_time=entry.break_end_time or None,
        hourly_rate=hourly_rate,
        total_minutes=actual_work_minutes,
        regular_minutes=breakdown.regular_minutes,
        overtime_level1_minutes=breakdown.overtime_level1_minutes,
        overtime_level2_minutes=breakdown.overtime_level2_minutes,
        total_pay=breakdown.total_pay,
        note=entry.note,
    )


class LogService:
    """Service owning the in-memory work log collection."""

    def __init__(self, reconciler: SyncReconciler):
        """Initialize service with the reconciler used for persistence."""
        self.reconciler = reconciler
        self.logs: list[WorkLog] = []

    async def load(self) -> list[WorkLog]:
        """
        Load and reconcile the collection.

        Returns:
            Logs sorted most recent first
        """
        self.logs = sort_logs(await self.reconciler.load_logs())
        logger.info("Loaded %d work logs", len(self.logs))
        return self.logs

    def list_logs(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> list[WorkLog]:
        """
        List logs with optional filtering.

        Args:
            year: Optional calendar year filter
            month: Optional month filter (1-12)

        Returns:
            Matching logs, most recent first
        """
        result = self.logs
        if year is not None:
            result = [log for log in result if log.date.year == year]
        if month is not None:
            result = [log for log in result if log.date.month == month]
        return list(result)

    def get_log(self, log_id: str) -> WorkLog:
        """
        Get a log by id.

        Raises:
            LogNotFound: If no log has this id
        """
        for log in self.logs:
            if log.id == log_id:
                return log
        raise LogNotFound("Work log not found")

    async def add_log(self, log: WorkLog) -> WorkLog:
        """Append a finalized log and persist the collection."""
        self.logs = sort_logs([log, *self.logs])
        await self.reconciler.save_logs(self.logs)
        return log

    async def create_manual_entry(
        self,
        entry: WorkLogCreate,
        default_rate: float,
    ) -> WorkLog:
        """
        Create a log from a manual entry.

        Raises:
            ValidationError: If the entry leaves no worked minutes
        """
        return await self.add_log(build_manual_log(entry, default_rate))

    async def delete_log(self, log_id: str) -> dict:
        """
        Delete a log.

        Returns:
            Dictionary with deleted_count

        Raises:
            LogNotFound: If no log has this id
        """
        self.get_log(log_id)
        self.logs = [log for log in self.logs if log.id != log_id]
        await self.reconciler.save_logs(self.logs)
        return {"deleted_count": 1}

    async def clear_local(self) -> None:
        """Forget every log locally without touching the remote."""
        self.logs = []
        await self.reconciler.local.save_logs([])
