from functools import wraps
from typing import Callable, Optional, TypeVar

from holocron.config.logger import get_logger, log_file_path
from holocron.config.text_styles import COLOR_ERROR
from holocron.errors import NONFATAL_EXCEPTIONS

log = get_logger(__name__)


def summarize_traceback(exception: Exception) -> str:
    exception_str = str(exception)
    lines = exception_str.splitlines()
    exc_type = type(exception).__name__
    return f"{exc_type}: " + "\n".join(
        [
            line
            for line in lines
            if line.strip()
            and not line.lstrip().startswith("Traceback")
            and not line.lstrip().startswith("The above exception")
            and not line.startswith("    ")
        ]
    )


R = TypeVar("R")


def wrap_with_exception_printing(
    step: str,
) -> Callable[[Callable[..., R]], Callable[..., Optional[R]]]:
    """
    Decorator for user-facing steps: a non-fatal error is reported as one line naming
    the step that failed (details go to the log file) and the call returns None.
    Fatal errors propagate.
    """

    def decorator(func: Callable[..., R]) -> Callable[..., Optional[R]]:
        @wraps(func)
        def command(*args, **kwargs) -> Optional[R]:
            try:
                return func(*args, **kwargs)
            except NONFATAL_EXCEPTIONS as e:
                log.error(
                    f"[{COLOR_ERROR}]{step} failed:[/{COLOR_ERROR}] %s", summarize_traceback(e)
                )
                log.info("%s error details (log: %s): %s", step, log_file_path(), e, exc_info=True)
                return None

        return command

    return decorator


## Tests


def test_summarize_traceback():
    from holocron.errors import FileNotFound

    summary = summarize_traceback(FileNotFound("Catalog not found: /til/README.md"))
    assert summary == "FileNotFound: Catalog not found: /til/README.md"


def test_wrap_with_exception_printing():
    import pytest

    from holocron.errors import ProcessFailed, UnexpectedError

    @wrap_with_exception_printing("Sending message")
    def failing_process():
        raise ProcessFailed(["claude"], 1)

    @wrap_with_exception_printing("Sending message")
    def failing_bug():
        raise UnexpectedError("bug")

    @wrap_with_exception_printing("Adding")
    def add(a, b=1):
        return a + b

    assert failing_process() is None
    assert add(1, b=2) == 3
    assert add.__name__ == "add"
    with pytest.raises(UnexpectedError):
        failing_bug()
