class BookingApiError(RuntimeError):
    """Raised when the booking API is unreachable or answers with a non-200 code."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class FlowError(RuntimeError):
    """Raised when a step cannot complete (empty mandatory data, missing selections)."""
    pass


class SessionStateError(FlowError):
    """Raised when a stored session lacks a selection its step requires."""
    pass


class UnknownStepError(ValueError):
    """Raised for a stored step value outside the booking flow."""

    def __init__(self, step: int) -> None:
        super().__init__(f"Unknown flow step: {step}")
        self.step = step
