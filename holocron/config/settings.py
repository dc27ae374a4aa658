import os
import threading
from contextlib import contextmanager
from enum import Enum
from logging import DEBUG, ERROR, INFO, WARNING
from pathlib import Path

from pydantic.dataclasses import dataclass


APP_NAME = "holocron"

CONFIG_PATH = "~/.config/holocron/config.yml"

CONFIG_PATH_ENV = "HOLOCRON_CONFIG"

LOG_DIR = "~/.local/state/holocron/logs"

LOG_FILE_NAME = "holocron.log"

CLAUDE_COMMAND = "claude"

CONTEXT_TRUNCATE_LEN = 500
"""Characters of each assistant response kept when summarizing a session."""


class LogLevel(Enum):
    debug = DEBUG
    info = INFO
    warning = WARNING
    message = WARNING  # Same as warning, just for important console messages.
    error = ERROR

    @classmethod
    def parse(cls, level_str: str):
        canon_name = level_str.strip().lower()
        if canon_name == "warn":
            canon_name = "warning"
        try:
            return cls[canon_name]
        except KeyError:
            raise ValueError(
                f"Invalid log level: `{level_str}`. Valid options are: {', '.join(f'`{name}`' for name in cls.__members__)}"
            )

    def __str__(self):
        return self.name


@dataclass
class Settings:
    console_log_level: LogLevel
    """The log level for console-based logging."""

    file_log_level: LogLevel
    """The log level for file-based logging."""

    log_dir: Path
    """Where the log file is written."""

    claude_command: str
    """The executable used for streaming conversations."""

    context_truncate_len: int
    """Truncation length for assistant responses in session summaries."""


# Initial default settings.
_settings = Settings(
    console_log_level=LogLevel.warning,
    file_log_level=LogLevel.info,
    log_dir=Path(LOG_DIR).expanduser(),
    claude_command=CLAUDE_COMMAND,
    context_truncate_len=CONTEXT_TRUNCATE_LEN,
)


def global_settings() -> Settings:
    """
    Read access to global settings.
    """
    return _settings


_settings_lock = threading.RLock()


@contextmanager
def update_global_settings():
    """
    Context manager for thread-safe updates to global settings.
    """
    with _settings_lock:
        yield _settings


def apply_env_overrides() -> None:
    """
    Pick up settings from the environment (including any `.env` file already loaded).
    """
    with update_global_settings() as settings:
        level = os.environ.get("HOLOCRON_LOG_LEVEL")
        if level:
            settings.console_log_level = LogLevel.parse(level)
        command = os.environ.get("HOLOCRON_CLAUDE_COMMAND")
        if command:
            settings.claude_command = command


## Tests


def test_log_level_parse():
    import pytest

    assert LogLevel.parse("WARN") == LogLevel.warning
    assert LogLevel.parse(" debug ") == LogLevel.debug
    assert str(LogLevel.error) == "error"
    with pytest.raises(ValueError):
        LogLevel.parse("loud")
