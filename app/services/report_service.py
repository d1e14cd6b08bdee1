"""Report service - summaries and exports of work logs."""
import csv
import io
from collections import defaultdict
from datetime import date
from typing import Optional

from app.models.summary import DailySummary, MonthlySummary, Overview
from app.models.work_log import WorkLog
from app.utils.duration import format_duration


CSV_BOM = "\ufeff"
CSV_HEADERS = [
    "Date",
    "Start",
    "End",
    "Break (min)",
    "Total (h)",
    "Regular (h)",
    "Overtime first 2h (h)",
    "Overtime after 2h (h)",
    "Hourly rate",
    "Pay",
    "Note",
]


def filter_month(logs: list[WorkLog], month: Optional[str]) -> list[WorkLog]:
    """Keep logs of one YYYY-MM month (all logs when month is None)."""
    if not month:
        return list(logs)
    return [log for log in logs if log.month == month]


def daily_summaries(logs: list[WorkLog]) -> list[DailySummary]:
    """Per-day totals, most recent day first."""
    minutes: dict[date, int] = defaultdict(int)
    pay: dict[date, int] = defaultdict(int)
    for log in logs:
        minutes[log.date] += log.total_minutes
        pay[log.date] += log.total_pay

    return [
        DailySummary(date=day, minutes=minutes[day], pay=pay[day])
        for day in sorted(minutes, reverse=True)
    ]


def monthly_summaries(logs: list[WorkLog]) -> list[MonthlySummary]:
    """Per-month totals, most recent month first."""
    grouped: dict[str, list[WorkLog]] = defaultdict(list)
    for log in logs:
        grouped[log.month].append(log)

    return [
        MonthlySummary(
            month=month,
            total_pay=sum(log.total_pay for log in month_logs),
            total_minutes=sum(log.total_minutes for log in month_logs),
            overtime_minutes=sum(log.overtime_minutes for log in month_logs),
            days_worked=len({log.date for log in month_logs}),
            log_count=len(month_logs),
        )
        for month, month_logs in sorted(grouped.items(), reverse=True)
    ]


def overview(logs: list[WorkLog]) -> Overview:
    """Totals across all given logs."""
    return Overview(
        total_pay=sum(log.total_pay for log in logs),
        total_minutes=sum(log.total_minutes for log in logs),
        days_worked=len({log.date for log in logs}),
        log_count=len(logs),
    )


def _hours(minutes: int) -> str:
    return f"{minutes / 60:.2f}"


def build_csv(logs: list[WorkLog]) -> str:
    """
    Export logs as CSV with daily and monthly total sections.

    The output starts with a UTF-8 BOM so spreadsheet tools detect the
    encoding.

    Args:
        logs: Logs to export, in the order they should appear

    Returns:
        CSV text
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    padding = [""] * (len(CSV_HEADERS) - 3)

    writer.writerow(CSV_HEADERS)
    for log in logs:
        writer.writerow([
            log.date.isoformat(),
            log.start_time,
            log.end_time,
            log.break_minutes,
            _hours(log.total_minutes),
            _hours(log.regular_minutes),
            _hours(log.overtime_level1_minutes),
            _hours(log.overtime_level2_minutes),
            f"{log.hourly_rate:g}",
            log.total_pay,
            log.note,
        ])

    writer.writerow([])
    writer.writerow(["=== Daily totals ==="])
    writer.writerow(["Date", "", "", "", "Total (h)", "", "", "", "", "Day pay", ""])
    for summary in daily_summaries(logs):
        writer.writerow([
            summary.date.isoformat(), "", "", "", _hours(summary.minutes),
            "", "", "", "", summary.pay, "(daily total)",
        ])

    writer.writerow([])
    writer.writerow(["=== Monthly totals ==="])
    writer.writerow(["Month", *padding, "Month pay", ""])
    for summary in monthly_summaries(logs):
        writer.writerow([summary.month, *padding, summary.total_pay, "(monthly total)"])

    return CSV_BOM + buffer.getvalue()


def build_text_report(logs: list[WorkLog], today: date) -> str:
    """
    Plain-text pay report, chronological and grouped by month.

    Args:
        logs: Logs to report
        today: Report generation date

    Returns:
        Report text
    """
    ordered = sorted(logs, key=lambda log: (log.date, log.start_time))
    totals = overview(ordered)

    lines = [
        "[WorkLog pay report]",
        f"Generated: {today.isoformat()}",
        "------------------------",
        f"Days worked: {totals.days_worked}",
        f"Total time: {format_duration(totals.total_minutes)}",
        f"Total pay: {totals.total_pay}",
        "------------------------",
        "",
    ]

    current_month = None
    for log in ordered:
        if log.month != current_month:
            lines.append("")
            lines.append(f"[ {log.month} ]")
            current_month = log.month

        line = (
            f"{log.date.strftime('%m-%d')} ({log.start_time}~{log.end_time}) "
            f"{format_duration(log.total_minutes)} | ${log.total_pay}"
        )
        if log.overtime_minutes > 0:
            line += " (incl. overtime)"
        if log.note:
            line += f" | {log.note}"
        lines.append(line)

    return "\n".join(lines) + "\n"
