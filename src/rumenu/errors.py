# =============================================================================
# Error Handling Types (Result + exception hierarchy)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")

# Exit code for every failure that is not an external process exit status
INTERNAL_ERROR_EXIT_CODE = 255


class ErrorType(Enum):
    PARSE_ERROR = "parse_error"
    IO_ERROR = "io_error"
    NO_CANDIDATES = "no_candidates"
    PICKER_ERROR = "picker_error"
    COMMAND_ERROR = "command_error"
    PERSISTENCE_ERROR = "persistence_error"


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class Result(Generic[T]):
    """
    Outcome of a best-effort operation.

    Unlike an exception, a failed Result may still carry a usable value
    (e.g. the entries parsed before a malformed line).
    """
    success: bool
    value: T | None = None
    error: Error | None = None

    @staticmethod
    def ok(value: T) -> Result[T]:
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error, value: T | None = None) -> Result[T]:
        return Result(success=False, value=value, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success


class RumenuError(Exception):
    """Base class for errors that end a launcher run."""

    error_type: ErrorType = ErrorType.IO_ERROR

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    @property
    def exit_code(self) -> int:
        return INTERNAL_ERROR_EXIT_CODE

    def to_error(self) -> Error:
        return Error(
            error_type=self.error_type,
            message=self.message,
            context=dict(self.context),
            original_exception=self,
        )


class NoCandidatesError(RumenuError):
    error_type = ErrorType.NO_CANDIDATES


class ProcessExitError(RumenuError):
    """An external program could not be started or exited non-zero."""

    def __init__(self, message: str, returncode: int | None = None, **context):
        super().__init__(message, returncode=returncode, **context)
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        # Not started (None) or killed by a signal (negative) is internal
        if self.returncode is None or self.returncode < 0:
            return INTERNAL_ERROR_EXIT_CODE
        return self.returncode


class PickerError(ProcessExitError):
    error_type = ErrorType.PICKER_ERROR


class CommandError(ProcessExitError):
    """The selected command failed; tagged with the selection text."""

    error_type = ErrorType.COMMAND_ERROR

    def __init__(self, selection: str, reason: str, returncode: int | None = None):
        super().__init__(f"{selection}: {reason}", returncode=returncode, selection=selection)
        self.selection = selection


class PersistenceError(RumenuError):
    error_type = ErrorType.PERSISTENCE_ERROR
