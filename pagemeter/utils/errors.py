"""
Measurement error types and consistent error message extraction.

Only :class:`SessionLaunchError` is allowed to escape a measurement;
every other failure is recovered where it happens and degrades a
single field of the result to its default.
"""


class MeasurementError(Exception):
    """Base class for errors raised by the measurement engine."""


class SessionLaunchError(MeasurementError):
    """The browser session could not be started.

    Fatal for the call: no partial result is produced.
    """

    def __init__(self, message: str, executable_path: str | None = None) -> None:
        super().__init__(message)
        self.executable_path = executable_path


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Falls back to the exception class name when the message is empty,
    so log lines never carry a blank ``error=`` value.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
