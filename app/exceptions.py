"""Domain errors raised by the payroll and session services."""


class WorkLogError(ValueError):
    """Base class for business rule violations."""


class ValidationError(WorkLogError):
    """Raised when input data is invalid or would produce an unusable record."""


class InvalidTransition(WorkLogError):
    """Raised when a session action is attempted from a state that forbids it."""

    def __init__(self, action: str, state: str):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while {state}")


class ZeroDurationWarning(WorkLogError):
    """
    Raised when a clock-out would produce a record with no billable minutes.

    Not fatal: the caller may confirm and retry to commit a zero-pay record.
    """

    def __init__(self, raw_work_minutes: int, billable_minutes: int):
        self.raw_work_minutes = raw_work_minutes
        self.billable_minutes = billable_minutes
        super().__init__(
            f"Worked {raw_work_minutes} minutes, which rounds to "
            f"{billable_minutes} billable minutes; confirm to save anyway"
        )


class LogNotFound(WorkLogError):
    """Raised when a work log id does not exist."""


class RemoteUnavailable(Exception):
    """Raised when the remote store cannot be reached or answers with an error."""
