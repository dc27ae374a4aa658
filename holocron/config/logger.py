import logging
import os
from functools import cache
from logging import Formatter
from pathlib import Path
from typing import Optional

import rich
from rich import reconfigure
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from holocron.config.settings import global_settings, LOG_FILE_NAME, LogLevel
from holocron.config.text_styles import (
    EMOJI_ERROR,
    EMOJI_WARN,
    HolocronHighlighter,
    RICH_STYLES,
)


@cache
def get_highlighter():
    return HolocronHighlighter()


@cache
def get_theme():
    return Theme(RICH_STYLES)


reconfigure(theme=get_theme(), highlighter=get_highlighter())


def get_console() -> Console:
    return rich.get_console()


def log_file_path() -> Path:
    return global_settings().log_dir / LOG_FILE_NAME


_file_handler: Optional[logging.FileHandler] = None
_console_handler: Optional[RichHandler] = None


def logging_setup():
    """
    Set up or reset logging setup. Replaces all previous handlers on the holocron
    logger. Can be called again to reset with different settings.
    """
    global _file_handler, _console_handler

    os.makedirs(global_settings().log_dir, exist_ok=True)

    # Verbose logging to file, important logging to console.
    _file_handler = logging.FileHandler(log_file_path())
    _file_handler.setLevel(global_settings().file_log_level.value)
    _file_handler.setFormatter(Formatter("%(asctime)s %(levelname).1s %(name)s - %(message)s"))

    _console_handler = RichHandler(
        console=get_console(),
        level=global_settings().console_log_level.value,
        show_time=False,
        show_path=False,
        show_level=False,
        highlighter=get_highlighter(),
        markup=True,
    )
    _console_handler.setLevel(global_settings().console_log_level.value)
    _console_handler.setFormatter(Formatter("%(message)s"))

    logger = logging.getLogger("holocron")
    logger.setLevel(min(_file_handler.level, _console_handler.level))
    logger.propagate = False
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(_console_handler)
    logger.addHandler(_file_handler)


def prefix(line, warn_emoji: str = ""):
    return " ".join(filter(None, [warn_emoji, line]))


def prefix_args(args, warn_emoji: str = ""):
    if len(args) > 0:
        args = (prefix(args[0], warn_emoji),) + args[1:]
    return args


class CustomLogger:
    """
    Custom logger to be clearer about user messages.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, *args, **kwargs):
        self.logger.debug(*args, **kwargs)

    def info(self, *args, **kwargs):
        self.logger.info(*args, **kwargs)

    def message(self, *args, **kwargs):
        self.logger.warning(*args, **kwargs)

    def warning(self, *args, **kwargs):
        self.logger.warning(*prefix_args(args, warn_emoji=EMOJI_WARN), **kwargs)

    def error(self, *args, **kwargs):
        self.logger.error(*prefix_args(args, warn_emoji=EMOJI_ERROR), **kwargs)

    def log(self, level: LogLevel, *args, **kwargs):
        getattr(self, level.name)(*args, **kwargs)

    # Fallback for other attributes/methods.
    def __getattr__(self, attr):
        return getattr(self.logger, attr)


def get_logger(name: str):
    return CustomLogger(name)


## Tests


def test_custom_logger_prefixes(caplog):
    log = get_logger("holocron.test_logger")
    with caplog.at_level(logging.DEBUG, logger="holocron.test_logger"):
        log.warning("disk %s", "full")
        log.message("plain note")
        log.log(LogLevel.info, "via level")

    messages = [record.getMessage() for record in caplog.records]
    assert f"{EMOJI_WARN} disk full" in messages
    assert "plain note" in messages
    assert "via level" in messages
