"""Errors for pagedsink.

This module provides:
- The exception vocabulary raised by paged sinks
- Translation of platform "broken pipe" errors into that vocabulary
- Error codes and the error envelope used by the CLI (text and --json)
"""

import errno
import json
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Optional

from .common import PRODUCER


# =============================================================================
# Exceptions
# =============================================================================


class PagerError(Exception):
    """Base class for errors raised by a paged sink."""


class NoCommandConfigured(PagerError):
    """Raised at open time when no pager command can be resolved."""

    def __init__(self, env_var: str):
        self.env_var = env_var
        super().__init__(
            f"No pager command to execute (argument empty and ${env_var} unset)"
        )


class ClosedByConsumer(PagerError):
    """Raised when the program reading from the pager pipe went away."""

    def __init__(self, written: int = 0):
        self.written = written
        super().__init__("The pager was closed by its consumer")


class PagerClosed(PagerError):
    """Raised when writing to a sink that has already been torn down."""

    def __init__(self):
        super().__init__("The pager is closed")


# =============================================================================
# Translation
# =============================================================================

# Windows reports a vanished pipe reader through winerror, not errno
ERROR_BROKEN_PIPE = 109
ERROR_NO_DATA = 232


def is_broken_pipe(err: BaseException) -> bool:
    """Check whether an error means the reading end of a pipe was closed."""
    if isinstance(err, BrokenPipeError):
        return True
    if not isinstance(err, OSError):
        return False
    if err.errno == errno.EPIPE:
        return True
    return getattr(err, "winerror", None) in (ERROR_BROKEN_PIPE, ERROR_NO_DATA)


def translate_error(err: Optional[BaseException], written: int = 0):
    """Map a raw write or close error onto the sink's error vocabulary.

    Args:
        err: The raw error, or None.
        written: Bytes accepted before the error occurred.

    Returns:
        ClosedByConsumer for broken-pipe conditions (chained to the raw
        error), otherwise the raw error unchanged.
    """
    if err is None or not is_broken_pipe(err):
        return err
    translated = ClosedByConsumer(written)
    translated.__cause__ = err
    return translated


# =============================================================================
# Error Codes
# =============================================================================

NO_COMMAND = "NO_COMMAND"
PAGER_CLOSED = "PAGER_CLOSED"
PAGER_FAILED = "PAGER_FAILED"
SPAWN_FAILED = "SPAWN_FAILED"
IO_ERROR = "IO_ERROR"
FILE_NOT_FOUND = "FILE_NOT_FOUND"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Error Envelope
# =============================================================================


@dataclass
class ErrorReport:
    """Structured error for CLI output.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable error message.
        hints: Actionable suggestions for resolving the error.
        details: Context-specific error details.
    """

    code: str
    message: str
    hints: list[str] = field(default_factory=list)
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to error envelope dict."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "hints": self.hints,
                "details": self.details,
            },
            "producer": dict(PRODUCER),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def print_json(self, file=None) -> None:
        """Print error as JSON to file (default: stderr)."""
        if file is None:
            file = sys.stderr
        print(self.to_json(), file=file)

    def print_text(self, file=None) -> None:
        """Print error as human-readable text to file (default: stderr)."""
        if file is None:
            file = sys.stderr
        print(f"Error: {self.message}", file=file)
        for hint in self.hints:
            print(f"  Hint: {hint}", file=file)


# =============================================================================
# Factory Functions
# =============================================================================


def no_command(env_var: str) -> ErrorReport:
    """Create error for an unresolvable pager command."""
    return ErrorReport(
        code=NO_COMMAND,
        message="No pager command configured",
        hints=[
            f"Set ${env_var} (e.g. {env_var}='less -R')",
            "Pass --pager <command>",
            "Use --policy never to write without a pager",
        ],
        details={"env_var": env_var},
    )


def pager_closed() -> ErrorReport:
    """Create error for writing to a torn-down sink."""
    return ErrorReport(
        code=PAGER_CLOSED,
        message="The pager is closed",
        details={},
    )


def pager_failed(command: str, returncode: int) -> ErrorReport:
    """Create error for a pager that exited abnormally."""
    return ErrorReport(
        code=PAGER_FAILED,
        message=f"Pager exited with status {returncode}: {command}",
        hints=["Check that the pager command runs in a shell"],
        details={"command": command, "returncode": returncode},
    )


def spawn_failed(reason: str) -> ErrorReport:
    """Create error for a pager process that could not be started."""
    return ErrorReport(
        code=SPAWN_FAILED,
        message=f"Could not start pager: {reason}",
        hints=["Check that 'sh' is available on PATH"],
        details={"reason": reason},
    )


def io_error(reason: str) -> ErrorReport:
    """Create error for a failed read or write."""
    return ErrorReport(
        code=IO_ERROR,
        message=f"I/O error: {reason}",
        details={"reason": reason},
    )


def file_not_found(path: str) -> ErrorReport:
    """Create error for a missing input file."""
    return ErrorReport(
        code=FILE_NOT_FOUND,
        message=f"File not found: {path}",
        hints=["Check that the file path is correct"],
        details={"path": path},
    )


def invalid_argument(arg_name: str, value: str, reason: str = "") -> ErrorReport:
    """Create error for an invalid argument."""
    msg = f"Invalid argument '{arg_name}': {value}"
    if reason:
        msg += f" ({reason})"
    return ErrorReport(
        code=INVALID_ARGUMENT,
        message=msg,
        hints=["Run: pagedsink --help"],
        details={"argument": arg_name, "value": value, "reason": reason},
    )


def internal_error(message: str, details: Optional[dict] = None) -> ErrorReport:
    """Create internal error."""
    return ErrorReport(
        code=INTERNAL_ERROR,
        message=f"Internal error: {message}",
        hints=["Please report this issue"],
        details=details or {},
    )


def report_for(exc: BaseException) -> ErrorReport:
    """Build the envelope describing an exception raised by a sink."""
    if isinstance(exc, NoCommandConfigured):
        return no_command(exc.env_var)
    if isinstance(exc, PagerClosed):
        return pager_closed()
    if isinstance(exc, subprocess.CalledProcessError):
        cmd = exc.cmd[-1] if isinstance(exc.cmd, (list, tuple)) else str(exc.cmd)
        return pager_failed(cmd, exc.returncode)
    if isinstance(exc, OSError):
        return io_error(exc.strerror or str(exc))
    return internal_error(str(exc), {"type": type(exc).__name__})


# =============================================================================
# Output Helper
# =============================================================================


def print_error(
    error: ErrorReport,
    json_mode: bool = False,
    file=None,
) -> None:
    """Print error in appropriate format.

    Args:
        error: The error to print.
        json_mode: If True, print as JSON envelope. If False, print as text.
        file: Output file (default: stderr).
    """
    if json_mode:
        error.print_json(file)
    else:
        error.print_text(file)
