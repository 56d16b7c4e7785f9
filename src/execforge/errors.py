"""Exceptions raised by execforge.

two families: compilation problems (the bucket description can't be turned
into a valid execution) and platform problems (the server said no). platform
errors always carry the http status so callers can decide what to do.
"""


class ExecforgeError(Exception):
    """Base class for all execforge errors."""


class CompilationError(ExecforgeError, ValueError):
    """A bucket description can't be compiled into an execution configuration."""


class PlatformError(ExecforgeError):
    """The platform answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"{message} (HTTP {status_code})")


class ExecutionFailedError(PlatformError):
    """Creating the execution failed."""

    def __init__(self, status_code: int) -> None:
        super().__init__("Execution failed", status_code)


class DataResultError(PlatformError):
    """Fetching the tabular result of an execution failed."""

    def __init__(self, status_code: int) -> None:
        super().__init__("Data result failed", status_code)


class AuthenticationError(PlatformError):
    """Login or token refresh was rejected."""

    def __init__(self, status_code: int) -> None:
        super().__init__("Authentication failed", status_code)
