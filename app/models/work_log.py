"""Work log model definitions."""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


HH_MM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class PayBreakdown(BaseModel):
    """Worked minutes split into overtime tiers, plus the rounded pay."""

    regular_minutes: int = Field(ge=0)
    overtime_level1_minutes: int = Field(ge=0)
    overtime_level2_minutes: int = Field(ge=0)
    total_pay: int

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @property
    def total_minutes(self) -> int:
        """Sum of all tiers."""
        return self.regular_minutes + self.overtime_level1_minutes + self.overtime_level2_minutes


class WorkLogCreate(BaseModel):
    """Manual work log entry, as typed in by the user."""

    date: dt.date
    start_time: str = Field(pattern=HH_MM_PATTERN)
    end_time: str = Field(pattern=HH_MM_PATTERN)
    break_start_time: Optional[str] = Field(default=None, pattern=HH_MM_PATTERN)
    break_end_time: Optional[str] = Field(default=None, pattern=HH_MM_PATTERN)
    break_minutes: Optional[int] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    note: str = ""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class WorkLog(BaseModel):
    """Finalized work log record. Immutable once created."""

    id: str
    date: dt.date
    start_time: str = Field(pattern=HH_MM_PATTERN)
    end_time: str = Field(pattern=HH_MM_PATTERN)
    break_minutes: int = Field(ge=0)
    break_start_time: Optional[str] = None
    break_end_time: Optional[str] = None
    hourly_rate: float = Field(ge=0)
    total_minutes: int = Field(ge=0)
    regular_minutes: int = Field(ge=0)
    overtime_level1_minutes: int = Field(ge=0)
    overtime_level2_minutes: int = Field(ge=0)
    total_pay: int
    note: str = ""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def check_tiers_add_up(self) -> "WorkLog":
        """Tier minutes must account for every worked minute."""
        tiers = self.regular_minutes + self.overtime_level1_minutes + self.overtime_level2_minutes
        if tiers != self.total_minutes:
            raise ValueError(
                f"total_minutes ({self.total_minutes}) must equal the sum of tier minutes ({tiers})"
            )
        return self

    @property
    def month(self) -> str:
        """Calendar month as YYYY-MM."""
        return self.date.strftime("%Y-%m")

    @property
    def overtime_minutes(self) -> int:
        return self.overtime_level1_minutes + self.overtime_level2_minutes
