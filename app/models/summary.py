"""Summary and report model definitions."""
import datetime as dt

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class DailySummary(BaseModel):
    """Totals for one calendar day."""

    date: dt.date
    minutes: int
    pay: int

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class MonthlySummary(BaseModel):
    """Totals for one calendar month (YYYY-MM)."""

    month: str
    total_pay: int
    total_minutes: int
    overtime_minutes: int
    days_worked: int
    log_count: int

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class Overview(BaseModel):
    """Totals across a set of logs."""

    total_pay: int = 0
    total_minutes: int = 0
    days_worked: int = 0
    log_count: int = 0

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
