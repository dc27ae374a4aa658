"""
Settings that define the visual appearance of text outputs.
"""

import re

from rich.highlighter import _combine_regex, RegexHighlighter
from rich.style import Style

## Settings

CONSOLE_WRAP_WIDTH = 60
"""Width of banners and rules in console output."""

SPINNER = "dots12"
"""Progress spinner. For a list, use `python -m rich.spinner`."""


## Colors

COLOR_LOGO = "bold bright_cyan"

COLOR_EMPH = "bright_green"

COLOR_STATUS = "yellow"

COLOR_HINT = "bright_black"

COLOR_COMMAND = "green"

COLOR_VALUE = "cyan"

COLOR_PATH = "cyan"

COLOR_SUCCESS = "green"

COLOR_ERROR = "bright_red"

COLOR_SAVED = "blue"


## Formatting

HRULE_CHAR = "─"

BANNER_CHAR = "═"

HRULE_SHORT = HRULE_CHAR * 40

BANNER_RULE = BANNER_CHAR * CONSOLE_WRAP_WIDTH


## Symbols and emojis

PROMPT_MAIN = "❯"

PROMPT_FORM = "❯❯"

EMOJI_WARN = "△"

EMOJI_ERROR = EMOJI_WARN + EMOJI_WARN

EMOJI_SAVED = "⩣"

EMOJI_SUCCESS = "✓"

EMOJI_FAILURE = "✗"


class HolocronHighlighter(RegexHighlighter):
    """
    Highlighter for log and status lines.
    """

    base_style = "holocron."
    highlights = [
        _combine_regex(
            f"(?P<success>{re.escape(EMOJI_SUCCESS)})",
            f"(?P<failure>{re.escape(EMOJI_FAILURE)})",
            f"(?P<warn>{re.escape(EMOJI_WARN)})",
            f"(?P<saved>{re.escape(EMOJI_SAVED)})",
        ),
        _combine_regex(
            r"(?P<ellipsis>(\.\.\.|…))",
            r"(?P<path>\B(/[-\w._+]+)*\/)(?P<filename>[-\w._+]*)?",
            r"(?P<url>(file|https|http)://[-0-9a-zA-Z$_+!`(),.?/;:&=%#~]*)",
            r"(?P<code_span>`[^`\n]+`)",
        ),
    ]


RICH_STYLES = {
    "markdown.h1": Style(color=COLOR_EMPH, bold=True),
    "markdown.h2": Style(color=COLOR_EMPH, bold=True),
    "markdown.h3": Style(color=COLOR_EMPH, bold=True, italic=True),
    "holocron.ellipsis": Style(color=COLOR_HINT),
    "holocron.success": Style(color=COLOR_SUCCESS, bold=True),
    "holocron.failure": Style(color=COLOR_ERROR, bold=True),
    "holocron.warn": Style(color=COLOR_VALUE, bold=True),
    "holocron.saved": Style(color=COLOR_SAVED, bold=True),
    "holocron.path": Style(color=COLOR_PATH),
    "holocron.filename": Style(color=COLOR_VALUE),
    "holocron.url": Style(underline=True, color=COLOR_VALUE),
    "holocron.code_span": Style(color=COLOR_VALUE),
}
