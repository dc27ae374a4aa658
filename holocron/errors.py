"""
Unified hierarchy of error types. These inherit from standard errors like
ValueError and FileNotFoundError but are more fine-grained.
"""

from typing import Optional, Sequence, Tuple, Type


class HolocronRuntimeError(ValueError):
    """Base class for holocron runtime errors."""

    pass


class UnexpectedError(HolocronRuntimeError):
    """For unexpected errors or runtime check failures."""

    pass


class ApiResultError(HolocronRuntimeError):
    """Raised when an external process or API doesn't behave as expected."""

    pass


class ProcessFailed(ApiResultError):
    """Raised when the generation process exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, message: Optional[str] = None):
        self.command = list(command)
        self.returncode = returncode
        super().__init__(
            message or f"Process `{self.command[0]}` exited with status {returncode}"
        )


class SelfExplanatoryError(HolocronRuntimeError):
    """Common errors that arise from 'normal' problems that are largely self-explanatory,
    i.e., no stack trace should be necessary when reporting to the user."""

    pass


class InvalidInput(SelfExplanatoryError):
    """Raised when the wrong kind of input is given to a command."""

    pass


class MissingInput(InvalidInput):
    """Raised when an expected input is missing."""

    pass


class FileNotFound(InvalidInput, FileNotFoundError):
    """Raised when a file is not found."""

    pass


class InvalidFilename(InvalidInput):
    """Raised when a filename is invalid."""

    pass


class InvalidState(SelfExplanatoryError):
    """Raised when configuration or repository state isn't valid for an operation."""

    pass


class InvalidConfig(InvalidState):
    """Raised when the config file can't be parsed."""

    pass


class SetupError(SelfExplanatoryError):
    """Raised when a tool is not installed or something in the environment
    isn't set up right."""

    pass


NONFATAL_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    SelfExplanatoryError,
    ApiResultError,
    FileNotFoundError,
    IOError,
)
"""Exceptions that are not fatal and usually don't merit a full stack trace."""


def is_fatal(exception: Exception) -> bool:
    for e in NONFATAL_EXCEPTIONS:
        if isinstance(exception, e):
            return False
    return True


## Tests


def test_error_hierarchy():
    missing = FileNotFound("README.md")
    assert isinstance(missing, FileNotFoundError)
    assert isinstance(missing, ValueError)
    assert not is_fatal(missing)

    failed = ProcessFailed(["claude", "--print"], 2)
    assert failed.returncode == 2
    assert "claude" in str(failed)
    assert not is_fatal(failed)

    assert is_fatal(UnexpectedError("boom"))
    assert is_fatal(KeyError("x"))
