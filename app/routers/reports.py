"""Report endpoints - summaries and exports."""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response

from app.models.summary import DailySummary, MonthlySummary, Overview
from app.services import report_service
from app.tracker import Tracker, get_tracker


router = APIRouter(prefix="/reports", tags=["reports"])

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/overview", response_model=Overview)
async def get_overview(tracker: Tracker = Depends(get_tracker)):
    """Totals across every work log."""
    return report_service.overview(tracker.logs.list_logs())


@router.get("/daily", response_model=list[DailySummary])
async def get_daily(tracker: Tracker = Depends(get_tracker)):
    """Per-day totals, most recent first."""
    return report_service.daily_summaries(tracker.logs.list_logs())


@router.get("/monthly", response_model=list[MonthlySummary])
async def get_monthly(tracker: Tracker = Depends(get_tracker)):
    """Per-month totals, most recent first."""
    return report_service.monthly_summaries(tracker.logs.list_logs())


@router.get("/csv")
async def export_csv(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    tracker: Tracker = Depends(get_tracker),
):
    """
    Export work logs as CSV.

    - Optional month filter (YYYY-MM)
    """
    logs = report_service.filter_month(tracker.logs.list_logs(), month)
    filename = f"WorkLog_Report_{date.today().isoformat()}.csv"
    return Response(
        content=report_service.build_csv(logs),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/text", response_class=PlainTextResponse)
async def export_text(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    tracker: Tracker = Depends(get_tracker),
):
    """
    Plain-text pay report.

    - Optional month filter (YYYY-MM)
    """
    logs = report_service.filter_month(tracker.logs.list_logs(), month)
    return report_service.build_text_report(logs, today=date.today())
