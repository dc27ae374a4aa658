"""
Output to the console. These are for user interaction, not logging.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from rich.markup import escape
from rich.status import Status

from holocron.config.logger import get_console
from holocron.config.text_styles import (
    BANNER_RULE,
    COLOR_HINT,
    COLOR_LOGO,
    COLOR_STATUS,
    COLOR_SUCCESS,
    EMOJI_SUCCESS,
    HRULE_SHORT,
    SPINNER,
)

console = get_console()


def cprint(message: str = "", *args, **kwargs):
    """
    Print to the console with markup. Args are %-interpolated and escaped.
    """
    if args:
        message = message % tuple(escape(str(arg)) for arg in args)
    console.print(message, **kwargs)


def print_banner(title: str):
    cprint(f"[{COLOR_LOGO}]{BANNER_RULE}[/{COLOR_LOGO}]")
    cprint(f"[{COLOR_LOGO}]  {escape(title)}  [/{COLOR_LOGO}]")
    cprint(f"[{COLOR_LOGO}]{BANNER_RULE}[/{COLOR_LOGO}]")
    cprint()


def print_rule():
    cprint(f"[{COLOR_HINT}]{HRULE_SHORT}[/{COLOR_HINT}]")


def print_status(message: str, *args):
    cprint(f"[{COLOR_STATUS}]{message}[/{COLOR_STATUS}]", *args)


def print_success(message: str, *args):
    cprint(f"[bold {COLOR_SUCCESS}]{EMOJI_SUCCESS} {message}[/bold {COLOR_SUCCESS}]", *args)


def print_hint(message: str, *args):
    cprint(f"[{COLOR_HINT}]{message}[/{COLOR_HINT}]", *args)


class StreamPrinter:
    """
    Callback for streamed text: stops the spinner on the first fragment, optionally
    prints a heading, then echoes fragments as they arrive.
    """

    def __init__(self, status: Optional[Status] = None, heading: Optional[str] = None):
        self.status = status
        self.heading = heading
        self.started = False

    def __call__(self, text: str) -> None:
        if not self.started:
            self.started = True
            if self.status:
                self.status.stop()
            if self.heading:
                print_success(self.heading)
                print_rule()
        console.out(text, end="", highlight=False)
        console.file.flush()


@contextmanager
def streaming_output(
    message: str, heading: Optional[str] = None
) -> Generator[StreamPrinter, None, None]:
    """
    Show a spinner until the first text arrives, then stream the text.
    """
    with console.status(message, spinner=SPINNER) as status:
        printer = StreamPrinter(status, heading)
        try:
            yield printer
        finally:
            status.stop()
            cprint()
            cprint()


## Tests


def test_stream_printer(capsys):
    printer = StreamPrinter(heading=None)
    printer("Hello, ")
    printer("[world]")
    assert printer.started
    assert "Hello, [world]" in capsys.readouterr().out
