"""
Command-line entry point for holocron.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from holocron.claude.process_driver import ClaudeProcess
from holocron.config.logger import get_logger
from holocron.config.settings import APP_NAME
from holocron.config.setup import setup
from holocron.config.user_config import (
    config_path,
    DEFAULT_ARCHIVE_DIR,
    HolocronConfig,
    NotesFormat,
)
from holocron.errors import MissingInput, NONFATAL_EXCEPTIONS
from holocron.file_storage.repo_init import COMMANDS_DIR, init_til_repo
from holocron.learning_loop import run_interactive_mode, run_learning_session
from holocron.session import ConversationSession, LearningMode
from holocron.shell_tools.exception_printing import summarize_traceback
from holocron.shell_ui.prompt_input import prompt_choice, prompt_confirm, prompt_simple_string
from holocron.shell_ui.shell_output import cprint, print_banner, print_hint, print_success
from holocron.version import get_version

log = get_logger(__name__)


DESCRIPTION = """\
Holocron is your personal learning companion. Start an interactive session to deep
dive into topics, analyze articles, and generate TIL entries or detailed notes.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description=DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {get_version()}")
    subparsers = parser.add_subparsers(dest="command")

    learn = subparsers.add_parser("learn", help="Start a deep dive learning session on a topic")
    learn.add_argument("topic", help="The topic to learn about")
    learn.add_argument("-c", "--category", help="Category for TIL generation (e.g., git, rust)")

    link = subparsers.add_parser("link", help="Analyze and summarize an article from a URL")
    link.add_argument("url", help="The URL to analyze")
    link.add_argument("-c", "--category", help="Category for TIL generation (e.g., git, rust)")

    init = subparsers.add_parser("init", help="Initialize a new TIL repository")
    init.add_argument("path", type=Path, help="Where the TIL repository should be created")

    config = subparsers.add_parser("config", help="View or update holocron configuration")
    config.add_argument("--til-path", type=Path, help="Set the TIL repository path")
    config.add_argument("--notes-path", type=Path, help="Set the notes repository path")
    config.add_argument("--notes-format", help="Set the notes format (obsidian, logseq, plain)")
    config.add_argument("--archive-dir", help="Set the archive directory name")

    return parser


def prompt_path(prompt_text: str) -> Path:
    value = (prompt_simple_string(prompt_text) or "").strip()
    if not value:
        raise MissingInput(f"No path given: {prompt_text}")
    return Path(value).expanduser()


def first_run_setup() -> HolocronConfig:
    print_banner("Welcome to Holocron!")
    cprint("Let's set up your configuration.")
    cprint()

    til_path = prompt_path("Path to your TIL repository")

    if not til_path.exists():
        if prompt_confirm("TIL repository doesn't exist. Create it?"):
            init_til_repo(til_path, DEFAULT_ARCHIVE_DIR)
            print_success("Created TIL repository at %s", til_path)
    elif not (til_path / COMMANDS_DIR).exists():
        if prompt_confirm("Install the /til and /note commands in this repo?"):
            init_til_repo(til_path, DEFAULT_ARCHIVE_DIR)
            print_success("Installed commands at %s", til_path / COMMANDS_DIR)

    config = HolocronConfig.new(til_path)

    cprint()
    if prompt_confirm("Set up a notes/knowledge base path? (Obsidian, Logseq, etc.)", default=False):
        config.notes_path = prompt_path("Path to your notes repository")
        config.notes_format = NotesFormat.parse(
            prompt_choice("Notes format", [f.value for f in NotesFormat], default="obsidian")
        )

    path = config.save()
    cprint()
    print_success("Config saved to %s", path)
    cprint()
    return config


def ensure_config() -> HolocronConfig:
    return HolocronConfig.load() or first_run_setup()


def run_init(path: Path) -> None:
    result = init_til_repo(path, DEFAULT_ARCHIVE_DIR)

    print_success("Initialized TIL repository at %s", result.path)
    cprint()
    cprint("Created:")
    cprint("  - README.md%s", " (already existed, skipped)" if result.readme_existed else "")
    cprint("  - %s/%s", DEFAULT_ARCHIVE_DIR, " (already existed)" if result.archive_existed else "")
    cprint("  - %s", COMMANDS_DIR / "til.md")
    cprint("  - %s", COMMANDS_DIR / "note.md")
    cprint()
    print_hint("Run `holocron config --til-path <path>` to set this as your TIL path.")


def run_config(
    til_path: Optional[Path],
    notes_path: Optional[Path],
    notes_format: Optional[str],
    archive_dir: Optional[str],
) -> None:
    config = HolocronConfig.load() or HolocronConfig.new(Path())
    changed = False

    if til_path:
        config.til_path = til_path.expanduser()
        changed = True
    if notes_path:
        config.notes_path = notes_path.expanduser()
        changed = True
    if notes_format:
        config.notes_format = NotesFormat.parse(notes_format)
        changed = True
    if archive_dir:
        config.archive_dir = archive_dir
        changed = True

    if changed:
        config.save()
        print_success("Configuration updated.")

    cprint()
    cprint("[bold]Current Configuration:[/bold]")
    cprint("  TIL path:     %s", config.til_path)
    cprint("  Archive dir:  %s", config.archive_dir)
    if config.notes_path:
        cprint("  Notes path:   %s", config.notes_path)
        cprint("  Notes format: %s", config.notes_format)
    else:
        cprint("  Notes path:   (not configured)")
    cprint()
    cprint("Config file: %s", config_path())


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "init":
        run_init(args.path)
    elif args.command == "config":
        run_config(args.til_path, args.notes_path, args.notes_format, args.archive_dir)
    elif args.command in ("learn", "link"):
        config = ensure_config()
        if args.command == "learn":
            session = ConversationSession.create(LearningMode.deep_dive, args.topic, args.category)
        else:
            session = ConversationSession.create(LearningMode.link, args.url, args.category)
        run_learning_session(session, config, ClaudeProcess())
    else:
        run_interactive_mode(ensure_config(), ClaudeProcess())

    return 0


def main():
    setup()
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        cprint()
        sys.exit(130)
    except NONFATAL_EXCEPTIONS as e:
        log.error("%s", summarize_traceback(e))
        log.info("Error details: %s", e, exc_info=True)
        sys.exit(1)


## Tests


def test_parser():
    parser = build_parser()

    args = parser.parse_args(["learn", "Rust ownership", "-c", "rust"])
    assert (args.command, args.topic, args.category) == ("learn", "Rust ownership", "rust")

    args = parser.parse_args(["link", "https://example.com"])
    assert (args.command, args.url, args.category) == ("link", "https://example.com", None)

    args = parser.parse_args(["config", "--notes-format", "plain", "--archive-dir", "entries"])
    assert args.notes_format == "plain"
    assert args.archive_dir == "entries"
    assert args.til_path is None

    assert parser.parse_args([]).command is None


def test_run_init_and_config(tmp_path, monkeypatch):
    monkeypatch.setenv("HOLOCRON_CONFIG", str(tmp_path / "config.yml"))

    assert run(["init", str(tmp_path / "til")]) == 0
    assert (tmp_path / "til" / "README.md").exists()

    assert run(["config", "--til-path", str(tmp_path / "til"), "--notes-format", "logseq"]) == 0
    config = HolocronConfig.load()
    assert config
    assert config.til_path == tmp_path / "til"
    assert config.notes_format == NotesFormat.logseq


def test_first_run_end_of_input(tmp_path, monkeypatch):
    import pytest

    monkeypatch.setenv("HOLOCRON_CONFIG", str(tmp_path / "config.yml"))
    monkeypatch.setattr(f"{__name__}.prompt_simple_string", lambda *args: None)

    with pytest.raises(MissingInput):
        first_run_setup()
    assert not (tmp_path / "config.yml").exists()


if __name__ == "__main__":
    main()
