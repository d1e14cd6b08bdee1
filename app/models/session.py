"""Active session model definitions."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class SessionStatus(str, Enum):
    """Clock states of an active session."""

    WORKING = "working"
    BREAK = "break"


class ActiveSession(BaseModel):
    """
    In-progress clock-in state prior to being finalized into a WorkLog.

    Instants are epoch milliseconds; accumulated_break_time is a duration in
    milliseconds covering every completed break of this session.
    """

    status: SessionStatus
    start_time: int = Field(gt=0)
    break_start_time: Optional[int] = None
    accumulated_break_time: int = Field(ge=0)

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def check_break_instant(self) -> "ActiveSession":
        """A session on break must know when the break began."""
        if self.status == SessionStatus.BREAK and self.break_start_time is None:
            raise ValueError("break_start_time is required while on break")
        return self


class SessionView(BaseModel):
    """Current session plus raw elapsed durations for display."""

    session: Optional[ActiveSession] = None
    work_ms: int = 0
    current_break_ms: int = 0
    work_elapsed: str = "00:00:00"
    break_elapsed: str = "00:00:00"

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
