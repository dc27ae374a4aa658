"""
User configuration, persisted as YAML (by default at ~/.config/holocron/config.yml).
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from frontmatter_format import read_yaml_file, write_yaml_file
from pydantic import ValidationError
from pydantic.dataclasses import dataclass

from holocron.config.logger import get_logger
from holocron.config.settings import CONFIG_PATH, CONFIG_PATH_ENV
from holocron.errors import InvalidConfig, InvalidInput

log = get_logger(__name__)


DEFAULT_ARCHIVE_DIR = "archive"


class NotesFormat(str, Enum):
    obsidian = "obsidian"
    logseq = "logseq"
    plain = "plain"

    @classmethod
    def parse(cls, format_str: str) -> "NotesFormat":
        try:
            return cls(format_str.strip().lower())
        except ValueError:
            raise InvalidInput(
                f"Invalid notes format: `{format_str}`. Valid options are: {', '.join(f'`{name}`' for name in cls.__members__)}"
            )

    def __str__(self):
        return self.value


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_PATH_ENV) or CONFIG_PATH).expanduser()


@dataclass
class HolocronConfig:
    til_path: Path
    """Root of the TIL repository."""

    archive_dir: str = DEFAULT_ARCHIVE_DIR
    """Folder within the TIL repository that holds the entries."""

    notes_path: Optional[Path] = None
    """Root of the notes repository, if notes are set up."""

    notes_format: NotesFormat = NotesFormat.obsidian

    @classmethod
    def new(cls, til_path: Path) -> "HolocronConfig":
        return cls(til_path=Path(til_path).expanduser())

    def archive_path(self) -> Path:
        return self.til_path / self.archive_dir

    def til_skill_path(self) -> Path:
        return self.til_path / ".claude" / "commands" / "til.md"

    def note_skill_path(self) -> Path:
        return self.til_path / ".claude" / "commands" / "note.md"

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "til_path": str(self.til_path),
            "archive_dir": self.archive_dir,
            "notes_format": self.notes_format.value,
        }
        if self.notes_path:
            data["notes_path"] = str(self.notes_path)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HolocronConfig":
        data = dict(data)
        for key in ("til_path", "notes_path"):
            if data.get(key):
                data[key] = Path(str(data[key])).expanduser()
        if "notes_format" in data:
            data["notes_format"] = NotesFormat.parse(str(data["notes_format"]))
        return cls(**data)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Optional["HolocronConfig"]:
        """
        Load the config, or return None if there isn't one yet.
        """
        path = path or config_path()
        if not path.exists():
            return None
        data = read_yaml_file(str(path))
        if not isinstance(data, dict):
            raise InvalidConfig(f"Config file is not a YAML mapping: {path}")
        try:
            return cls.from_dict(data)
        except (TypeError, ValidationError, InvalidInput) as e:
            raise InvalidConfig(f"Could not read config file {path}: {e}") from e

    def save(self, path: Optional[Path] = None) -> Path:
        path = path or config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        write_yaml_file(self.as_dict(), str(path))
        log.info("Saved config: %s", path)
        return path


## Tests


def test_config_round_trip(tmp_path):
    config = HolocronConfig(
        til_path=Path("/path/to/til"),
        archive_dir="entries",
        notes_path=Path("/path/to/notes"),
        notes_format=NotesFormat.logseq,
    )
    path = config.save(tmp_path / "sub" / "config.yml")
    loaded = HolocronConfig.load(path)

    assert loaded == config


def test_config_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("til_path: ~/til\n")
    config = HolocronConfig.load(path)

    assert config
    assert config.til_path == Path("~/til").expanduser()
    assert config.archive_dir == "archive"
    assert config.notes_path is None
    assert config.notes_format == NotesFormat.obsidian
    assert config.archive_path() == Path("~/til/archive").expanduser()

    assert HolocronConfig.load(tmp_path / "missing.yml") is None


def test_config_invalid(tmp_path):
    import pytest

    path = tmp_path / "config.yml"
    path.write_text("til_path: /til\nnotes_format: wiki\n")
    with pytest.raises(InvalidConfig):
        HolocronConfig.load(path)

    path.write_text("- just\n- a list\n")
    with pytest.raises(InvalidConfig):
        HolocronConfig.load(path)


def test_skill_paths():
    config = HolocronConfig.new(Path("/test/til"))
    assert config.til_skill_path() == Path("/test/til/.claude/commands/til.md")
    assert config.note_skill_path() == Path("/test/til/.claude/commands/note.md")


def test_notes_format():
    import pytest

    assert NotesFormat.parse("Obsidian") == NotesFormat.obsidian
    assert str(NotesFormat.plain) == "plain"
    with pytest.raises(InvalidInput):
        NotesFormat.parse("wiki")
