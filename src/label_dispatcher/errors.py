"""Exceptions raised while dispatching a label print."""

from typing import Optional


class DispatchError(Exception):
    """Base error; ``exit_code`` is what the CLI exits with."""

    exit_code = 1


class UsageError(DispatchError):
    """Missing or invalid argument or configuration value."""


class ConversionError(DispatchError):
    """The image-conversion tool is unavailable or reported a failure."""


class DriverNotFoundError(DispatchError):
    """The printer-driver executable could not be started."""


class PrintAdvisory(DispatchError):
    """The printer driver exited non-zero.

    brother_ql is known to report errors after a job was transmitted
    successfully, so callers decide whether this is fatal.
    """

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode
